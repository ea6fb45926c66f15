"""Forwarding of raw byte streams and JSON value streams to a sender."""

from __future__ import annotations

import codecs
import json
from typing import Any, BinaryIO, Callable

_JSON_WHITESPACE = " \t\n\r"
_DECODE_CHUNK = 4096


class StreamWriter:
    """A file-like writer that hands every written block to ``send``."""

    def __init__(self, send: Callable[[bytes], Any]):
        self._send = send

    def write(self, data) -> int:
        """Send ``data`` and return its length; errors from ``send`` propagate."""
        self._send(data)
        return len(data)


def stream_reader(reader: BinaryIO, send: Callable[[bytes], Any], chunk_size: int = 1024) -> None:
    """Read ``reader`` to its end, sending each non-empty chunk."""
    writer = StreamWriter(send)
    while chunk := reader.read(chunk_size):
        writer.write(chunk)


def stream_decoder(reader, send: Callable[[Any], Any]) -> None:
    """Decode consecutive JSON values from ``reader`` and send each one.

    Values may be separated by whitespace or simply concatenated. An empty
    stream sends nothing; malformed or truncated input raises
    :class:`json.JSONDecodeError`.
    """
    decoder = json.JSONDecoder()
    utf8 = codecs.getincrementaldecoder("utf-8")()
    buffer = ""
    eof = False

    while True:
        buffer = buffer.lstrip(_JSON_WHITESPACE)
        if buffer:
            try:
                value, end = decoder.raw_decode(buffer)
            except json.JSONDecodeError:
                if eof:
                    raise
            else:
                # A value reaching the end of the buffer may still be growing
                # (a number split across reads), so wait for more input.
                if end < len(buffer) or eof:
                    buffer = buffer[end:]
                    send(value)
                    continue
        elif eof:
            return

        chunk = reader.read(_DECODE_CHUNK)
        if not chunk:
            eof = True
            buffer += utf8.decode(b"", final=True)
        elif isinstance(chunk, bytes):
            buffer += utf8.decode(chunk)
        else:
            buffer += chunk