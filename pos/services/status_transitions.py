import enum
from typing import Dict, Tuple

from pos.models.transaction import TransactionStatus


class StockEffect(str, enum.Enum):
    """What a status change does to product stock."""
    NONE = "none"
    RESTORE = "restore"


_S = TransactionStatus

# Every (old, new) pair is listed. Only completed -> cancelled touches stock.
TRANSITIONS: Dict[Tuple[TransactionStatus, TransactionStatus], StockEffect] = {
    (_S.PENDING, _S.PENDING): StockEffect.NONE,
    (_S.PENDING, _S.COMPLETED): StockEffect.NONE,
    (_S.PENDING, _S.CANCELLED): StockEffect.NONE,
    (_S.COMPLETED, _S.PENDING): StockEffect.NONE,
    (_S.COMPLETED, _S.COMPLETED): StockEffect.NONE,
    (_S.COMPLETED, _S.CANCELLED): StockEffect.RESTORE,
    (_S.CANCELLED, _S.PENDING): StockEffect.NONE,
    (_S.CANCELLED, _S.COMPLETED): StockEffect.NONE,
    (_S.CANCELLED, _S.CANCELLED): StockEffect.NONE,
}


def stock_effect(old: TransactionStatus, new: TransactionStatus) -> StockEffect:
    return TRANSITIONS[(TransactionStatus(old), TransactionStatus(new))]
