"""OKEx v3 frame classification."""

from typing import Any

from src.replay.adapters.base import JsonLinesDecoder


class OkexDecoder(JsonLinesDecoder):
    """Channel is the table name; symbols are the rows' instrument ids."""

    def channel_of(self, message: Any) -> str | None:
        """Get the table (``spot/trade``, ``swap/depth``, ...)."""
        if isinstance(message, dict):
            return message.get("table")
        return None

    def symbol_of(self, message: Any) -> str | None:
        """Get the instrument id of the first data row."""
        if not isinstance(message, dict):
            return None
        data = message.get("data")
        if data and isinstance(data[0], dict):
            return data[0].get("instrument_id")
        return None

    def symbols_of(self, message: Any) -> list[str]:
        """Get the distinct instrument ids of all data rows."""
        if not isinstance(message, dict) or not isinstance(message.get("data"), list):
            return []
        return list(
            dict.fromkeys(
                row["instrument_id"]
                for row in message["data"]
                if isinstance(row, dict) and "instrument_id" in row
            )
        )
