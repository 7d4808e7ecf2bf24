"""Binance frame classification (spot, US, Jersey and futures)."""

from typing import Any

from src.replay.adapters.base import JsonLinesDecoder


class BinanceDecoder(JsonLinesDecoder):
    """Channel and symbol both come from the combined stream name."""

    def channel_of(self, message: Any) -> str | None:
        """Get the stream channel (``btcusdt@depth@100ms`` -> ``depth``)."""
        stream = self._stream_of(message)
        if stream is None or "@" not in stream:
            return None
        return stream.split("@")[1]

    def symbol_of(self, message: Any) -> str | None:
        """Get the stream symbol (``btcusdt@trade`` -> ``btcusdt``)."""
        stream = self._stream_of(message)
        if stream is None or "@" not in stream:
            return None
        return stream.split("@", 1)[0]

    def _stream_of(self, message: Any) -> str | None:
        if isinstance(message, dict):
            stream = message.get("stream")
            if isinstance(stream, str):
                return stream
        return None
