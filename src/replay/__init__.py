"""Historical market data replay service package."""

from src.replay.enums import EXCHANGES, EXCHANGES_VERSION, Exchange
from src.replay.errors import (
    AuthorizationError,
    FetchError,
    NormalizationError,
    ReplayError,
    SegmentNotFoundError,
    TransientFetchError,
    ValidationError,
)
from src.replay.model import (
    BookChange,
    BookPriceLevel,
    DerivativeTicker,
    Disconnect,
    ExchangeDetails,
    Filter,
    ReplayMessage,
    Trade,
)
from src.replay.normalizers import (
    normalize_book_changes,
    normalize_derivative_tickers,
    normalize_trades,
)
from src.replay.service import (
    ReplayClient,
    ReplayStream,
    clear_cache,
    get_exchange_details,
    list_supported_exchanges,
    replay,
    replay_normalized,
)

__all__ = [
    "EXCHANGES",
    "EXCHANGES_VERSION",
    "AuthorizationError",
    "BookChange",
    "BookPriceLevel",
    "DerivativeTicker",
    "Disconnect",
    "Exchange",
    "ExchangeDetails",
    "FetchError",
    "Filter",
    "NormalizationError",
    "ReplayClient",
    "ReplayError",
    "ReplayMessage",
    "ReplayStream",
    "SegmentNotFoundError",
    "Trade",
    "TransientFetchError",
    "ValidationError",
    "clear_cache",
    "get_exchange_details",
    "list_supported_exchanges",
    "normalize_book_changes",
    "normalize_derivative_tickers",
    "normalize_trades",
    "replay",
    "replay_normalized",
]
