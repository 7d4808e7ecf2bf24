"""BitMEX frame classification."""

from typing import Any

from src.replay.adapters.base import JsonLinesDecoder


class BitmexDecoder(JsonLinesDecoder):
    """Channel is the table name; symbols come from the data rows."""

    def channel_of(self, message: Any) -> str | None:
        """Get the table of a message (welcome and acks have none)."""
        if isinstance(message, dict):
            return message.get("table")
        return None

    def symbol_of(self, message: Any) -> str | None:
        """Get the symbol of the first data row, else the partial filter."""
        if not isinstance(message, dict):
            return None
        data = message.get("data")
        if data and isinstance(data[0], dict) and "symbol" in data[0]:
            return data[0]["symbol"]
        message_filter = message.get("filter")
        if isinstance(message_filter, dict):
            return message_filter.get("symbol")
        return None

    def symbols_of(self, message: Any) -> list[str]:
        """Get the distinct symbols of all data rows; tables batch symbols."""
        if not isinstance(message, dict):
            return []
        rows = message.get("data")
        if rows and isinstance(rows, list):
            symbols = [
                row["symbol"]
                for row in rows
                if isinstance(row, dict) and "symbol" in row
            ]
            if symbols:
                return list(dict.fromkeys(symbols))
        symbol = self.symbol_of(message)
        return [symbol] if symbol is not None else []
