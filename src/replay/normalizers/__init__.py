"""Built-in normalizers for replay_normalized."""

from src.replay.normalizers.normalizer import (
    ExchangeNormalizer,
    normalize_book_changes,
    normalize_derivative_tickers,
    normalize_trades,
)

__all__ = [
    "ExchangeNormalizer",
    "normalize_book_changes",
    "normalize_derivative_tickers",
    "normalize_trades",
]
