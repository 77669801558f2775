import secrets
from datetime import datetime
from typing import Optional

from pos.config import get_settings
from pos.utils.clock import local_now


def generate_transaction_number(
    now: Optional[datetime] = None, prefix: Optional[str] = None
) -> str:
    """
    Build a human-readable transaction number such as
    ``TXN-20261018143015123-0421``: prefix, creation time to the millisecond,
    and four random digits.

    Collisions are unlikely but possible; the unique index on
    ``transactions.transaction_number`` has the final say.
    """
    now = now or local_now()
    prefix = prefix or get_settings().TRANSACTION_NUMBER_PREFIX
    stamp = now.strftime("%Y%m%d%H%M%S") + f"{now.microsecond // 1000:03d}"
    return f"{prefix}-{stamp}-{secrets.randbelow(10000):04d}"
