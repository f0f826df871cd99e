"""
Keyboard input
==============
Puts the terminal in cbreak mode and turns raw bytes from stdin into key
names the view controller understands.
"""

from __future__ import annotations

import logging
import os
import sys
import termios
import tty
from typing import Any, Callable

from .reactor import Handle, Reactor

logger = logging.getLogger(__name__)

ESCAPE_KEYS = {
    b"[A": "UP",
    b"[B": "DOWN",
    b"[C": "RIGHT",
    b"[D": "LEFT",
    b"OA": "UP",
    b"OB": "DOWN",
    b"OC": "RIGHT",
    b"OD": "LEFT",
}


def decode_keys(data: bytes) -> list[str]:
    keys: list[str] = []
    i = 0
    while i < len(data):
        byte = data[i:i + 1]
        if byte == b"\x1b":
            seq = data[i + 1:i + 3]
            if seq in ESCAPE_KEYS:
                keys.append(ESCAPE_KEYS[seq])
                i += 3
                continue
            # Unknown CSI sequence: swallow up to its final byte.
            if seq[:1] == b"[":
                j = i + 2
                while j < len(data) and not (0x40 <= data[j] <= 0x7E):
                    j += 1
                i = j + 1
                keys.append("ESC")
                continue
            keys.append("ESC")
            i += 1
            continue
        if byte == b"\t":
            keys.append("TAB")
        elif byte in (b"\r", b"\n"):
            keys.append("ENTER")
        else:
            keys.append(byte.decode("utf-8", errors="ignore") or "?")
        i += 1
    return keys


class KeyReader:
    def __init__(self, reactor: Reactor, on_key: Callable[[str], Any]):
        self.reactor = reactor
        self.on_key = on_key
        self.enabled = os.name == "posix" and sys.stdin.isatty()
        self.fd: int | None = None
        self._old: Any = None
        self._watch: Handle | None = None

    def __enter__(self):
        if self.enabled:
            self.fd = sys.stdin.fileno()
            self._old = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
            self._watch = self.reactor.add_reader(self.fd, self._readable)
        return self

    def __exit__(self, exc_type, exc, tb):
        if self._watch is not None:
            self._watch.cancel()
            self._watch = None
        if self.enabled and self.fd is not None and self._old is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._old)

    def _readable(self):
        try:
            raw = os.read(self.fd, 64)
        except OSError as exc:
            logger.warning("Reading keyboard input failed: %s", exc)
            return
        for key in decode_keys(raw):
            self.on_key(key)
