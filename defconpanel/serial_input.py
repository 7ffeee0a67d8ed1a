"""Turning console input into command documents."""

from __future__ import annotations

import json

TERMINATOR = "\r\n"
DELIMITER = " "
# Line buffer size, one less than the storage to leave room for the terminator.
BUFFER_SIZE = 119


def command_message(command: str | None, payload: str | None) -> str:
    """Build the command document placed on the command queue."""
    return json.dumps({"COMANDO": command, "PAYLOAD": payload}, separators=(",", ":"))


class SerialLineReader:
    """Collects console characters into CRLF-terminated commands."""

    def __init__(self, capacity: int = BUFFER_SIZE) -> None:
        if capacity <= len(TERMINATOR):
            raise ValueError("buffer too small for a terminated line")
        self.capacity = capacity
        self._buffer: list[str] = []
        self._term_pos = 0

    def _reset(self) -> None:
        self._buffer.clear()
        self._term_pos = 0

    def feed(self, data: str | bytes) -> list[str]:
        """Take more input and return the command documents it completes.

        A line longer than the buffer is dropped together with the rest of `data`.
        """
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("latin-1")
        messages: list[str] = []
        for ch in data:
            if ch == "\0":
                continue
            if len(self._buffer) >= self.capacity:
                self._reset()
                break
            self._buffer.append(ch)

            if TERMINATOR[self._term_pos] != ch:
                self._term_pos = 0
                continue
            self._term_pos += 1
            if self._term_pos == len(TERMINATOR):
                line = "".join(self._buffer[: -len(TERMINATOR)])
                tokens = [token for token in line.split(DELIMITER) if token]
                command = tokens[0] if tokens else None
                payload = tokens[1] if len(tokens) > 1 else None
                messages.append(command_message(command, payload))
                self._reset()
        return messages