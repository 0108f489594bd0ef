"""Request framing for the line-oriented engine protocol.

The engine reads one analysis unit per line, so a unit must never contain
a raw line break. ``encode_unit`` escapes backslash, LF and CR;
``decode_unit`` is its exact inverse.
"""

import re
from typing import Iterable

_ESCAPES = {'\\': '\\\\', '\n': '\\n', '\r': '\\r'}
_UNESCAPES = {'\\': '\\', 'n': '\n', 'r': '\r'}

# Letters only, optionally hyphen-joined ("кто-то"); digits and punctuation are dropped
_WORD_RE = re.compile(r"[^\W\d_]+(?:-[^\W\d_]+)*")


def encode_unit(unit: str) -> str:
    """Escape a unit so it fits on a single line."""
    return ''.join(_ESCAPES.get(ch, ch) for ch in unit)


def decode_unit(line: str) -> str:
    """Invert ``encode_unit``. Unknown escape sequences are kept verbatim."""
    out: list[str] = []
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == '\\' and i + 1 < len(line) and line[i + 1] in _UNESCAPES:
            out.append(_UNESCAPES[line[i + 1]])
            i += 2
            continue
        out.append(ch)
        i += 1
    return ''.join(out)


def frame_units(units: Iterable[str]) -> list[str]:
    """Encode every unit and terminate it with a newline."""
    return [encode_unit(unit) + '\n' for unit in units]


def split_tokens(text: str) -> list[str]:
    """Reduce free text to the word tokens the engine is asked about, in order."""
    return _WORD_RE.findall(text)
