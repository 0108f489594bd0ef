"""Response tokenizer for mystem text output.

Splits one output line into the surface word and its raw analysis entries:

    кошка\\t{кошка=S,жен,неод=им,ед}
    стали{сталь=S,жен,неод=(род,ед|дат,ед)|становиться=V,нп=прош,мн,изъяв}

The tab before the brace group is optional. ``|`` separates entries only
outside parentheses; inside them it separates ambiguous form alternatives.
A backslash escapes the next character in surface and lemma text.
"""

from dataclasses import dataclass

from domain.model.errors import ProtocolFramingError

ESCAPE = '\\'
OPEN_LIST, CLOSE_LIST = '{', '}'
OPEN_GROUP, CLOSE_GROUP = '(', ')'
ENTRY_SEPARATOR = '|'


@dataclass(frozen=True)
class RawEntry:
    """One analysis entry, still escaped, with its byte offset in the line."""
    text: str
    offset: int


@dataclass(frozen=True)
class RawLine:
    """A tokenized output line."""
    raw: str
    surface: str
    entries: tuple[RawEntry, ...] = ()

    @property
    def analyzed(self) -> bool:
        return bool(self.entries)


def byte_offset(text: str, index: int) -> int:
    """UTF-8 byte offset of character ``index`` in ``text``."""
    return len(text[:index].encode('utf-8'))


def unescape(text: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(text):
        if text[i] == ESCAPE and i + 1 < len(text):
            out.append(text[i + 1])
            i += 2
            continue
        out.append(text[i])
        i += 1
    return ''.join(out)


def find_unescaped(text: str, target: str, *, last: bool = False) -> int:
    """Index of the first (or last) unescaped ``target`` in ``text``, or -1."""
    found = -1
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == ESCAPE:
            i += 2
            continue
        if ch == target:
            if not last:
                return i
            found = i
        i += 1
    return found


def tokenize_line(line: str) -> RawLine:
    """Split a raw output line into surface text and raw analysis entries.

    Raises:
        ProtocolFramingError: the delimiter structure is malformed.
    """
    raw = line.rstrip('\r\n')
    if not raw.strip():
        raise ProtocolFramingError("Empty response line", raw_line=line, offset=0)

    def fail(message: str, index: int) -> ProtocolFramingError:
        return ProtocolFramingError(message, raw_line=raw, offset=byte_offset(raw, index))

    surface: list[str] = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == ESCAPE:
            if i + 1 >= len(raw):
                raise fail("Dangling escape character", i)
            surface.append(raw[i + 1])
            i += 2
            continue
        if ch in ('\t', OPEN_LIST):
            break
        if ch in (CLOSE_LIST, ENTRY_SEPARATOR):
            raise fail(f"Unexpected {ch!r} in surface text", i)
        surface.append(ch)
        i += 1

    if i < len(raw) and raw[i] == '\t':
        i += 1
    if i >= len(raw) or not raw[i:].strip():
        # Surface only: the engine could not analyze this token
        return RawLine(raw=raw, surface=''.join(surface))
    if raw[i] != OPEN_LIST:
        raise fail(f"Expected {OPEN_LIST!r} after surface text", i)

    list_start = i
    entries: list[RawEntry] = []
    entry_start = i + 1
    depth = 0
    i += 1
    while i < len(raw):
        ch = raw[i]
        if ch == ESCAPE:
            if i + 1 >= len(raw):
                raise fail("Dangling escape character", i)
            i += 2
            continue
        if ch == OPEN_GROUP:
            depth += 1
        elif ch == CLOSE_GROUP:
            depth -= 1
            if depth < 0:
                raise fail(f"Unmatched {CLOSE_GROUP!r}", i)
        elif ch == OPEN_LIST:
            raise fail(f"Nested {OPEN_LIST!r}", i)
        elif ch == ENTRY_SEPARATOR and depth == 0:
            entries.append(RawEntry(raw[entry_start:i], byte_offset(raw, entry_start)))
            entry_start = i + 1
        elif ch == CLOSE_LIST:
            if depth:
                raise fail(f"Unclosed {OPEN_GROUP!r} in analysis list", i)
            last = raw[entry_start:i]
            if entries or last:
                entries.append(RawEntry(last, byte_offset(raw, entry_start)))
            if raw[i + 1:].strip():
                raise fail(f"Unexpected text after {CLOSE_LIST!r}", i + 1)
            return RawLine(raw=raw, surface=''.join(surface), entries=tuple(entries))
        i += 1

    raise fail(f"Unterminated analysis list, missing {CLOSE_LIST!r}", list_start)
