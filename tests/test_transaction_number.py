"""Tests for transaction number generation."""
import re
from datetime import datetime

from pos.services.transaction_number import generate_transaction_number


def test_format_embeds_creation_time():
    number = generate_transaction_number(now=datetime(2026, 10, 18, 14, 30, 15, 123456))

    assert re.fullmatch(r"TXN-20261018143015123-\d{4}", number)


def test_custom_prefix():
    number = generate_transaction_number(prefix="POS")

    assert re.fullmatch(r"POS-\d{17}-\d{4}", number)


def test_numbers_vary_within_the_same_millisecond():
    now = datetime(2026, 1, 1, 9, 0, 0)
    numbers = {generate_transaction_number(now=now) for _ in range(50)}

    assert len(numbers) > 1
