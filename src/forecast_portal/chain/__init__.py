from .receipts import (
    ChainInteractionFailed,
    confirm_receipt,
    extract_created_game,
    normalize_receipt,
)

__all__ = [
    "ChainInteractionFailed",
    "confirm_receipt",
    "extract_created_game",
    "normalize_receipt",
]
