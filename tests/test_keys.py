from __future__ import annotations

from icetop.keys import decode_keys


def test_plain_keys():
    assert decode_keys(b"jkq ") == ["j", "k", "q", " "]


def test_arrow_keys():
    assert decode_keys(b"\x1b[A\x1b[B\x1b[C\x1b[D") == ["UP", "DOWN", "RIGHT", "LEFT"]
    assert decode_keys(b"\x1bOA") == ["UP"]


def test_tab_and_escape():
    assert decode_keys(b"\t") == ["TAB"]
    assert decode_keys(b"\x1b") == ["ESC"]


def test_unknown_sequence_is_swallowed():
    assert decode_keys(b"\x1b[1;5Aj") == ["ESC", "j"]
    assert decode_keys(b"\x1b[<64;10;5Mr") == ["ESC", "r"]
