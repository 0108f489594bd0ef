"""Analysis decoder: raw analysis entries → ranked LexicalAnalysis list.

Entry grammar (text output):

    <lemma>[:<weight>]=<grammeme code>
    <lemma>??                    lemma guessed, no grammemes
    <lemma>=?                    engine could not classify the word

Entries are decoded independently. A malformed entry is either skipped
(the default, logged as a warning) or fails the whole word, depending on
MalformedPolicy. A word whose entries all fail to decode is a framing
error, never an empty result.
"""

import logging
import os
from enum import Enum
from typing import Sequence

from domain.model.analysis import LexicalAnalysis, WordResult
from domain.model.errors import MalformedAnalysisError, ProtocolFramingError
from domain.model.grammeme import GrammemeSet
from domain.model.grammeme_table import DEFAULT_GRAMMEME_TABLE, GrammemeTable
from utils.grammeme_decoder import decode_grammemes
from utils.response_tokenizer import RawEntry, find_unescaped, tokenize_line, unescape

logger = logging.getLogger(__name__)

GUESS_MARKER = '?'
WEIGHT_SEPARATOR = ':'
CODE_SEPARATOR = '='


class MalformedPolicy(str, Enum):
    """What to do with an analysis entry that cannot be decoded."""
    SKIP = 'skip'
    FAIL = 'fail'


DEFAULT_MALFORMED_POLICY = MalformedPolicy(os.getenv('MYSTEM_MALFORMED_POLICY', MalformedPolicy.SKIP.value))


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------

def decode_word_line(
    line: str,
    table: GrammemeTable = DEFAULT_GRAMMEME_TABLE,
    policy: MalformedPolicy = DEFAULT_MALFORMED_POLICY,
) -> WordResult:
    """Decode one text-format output line into a WordResult.

    Raises:
        ProtocolFramingError: the line is structurally malformed, or none
            of its entries could be decoded.
    """
    raw_line = tokenize_line(line)
    if not raw_line.analyzed:
        return WordResult.unanalyzed(raw_line.surface)

    analyses = decode_analyses(raw_line.entries, raw_line=raw_line.raw, table=table, policy=policy)
    if not analyses:
        raise ProtocolFramingError(
            "No decodable analyses in response line",
            raw_line=raw_line.raw,
            offset=raw_line.entries[0].offset,
        )
    return WordResult(text=raw_line.surface, analyses=tuple(analyses))


def decode_analyses(
    entries: Sequence[RawEntry],
    *,
    raw_line: str | None = None,
    table: GrammemeTable = DEFAULT_GRAMMEME_TABLE,
    policy: MalformedPolicy = DEFAULT_MALFORMED_POLICY,
) -> list[LexicalAnalysis]:
    """Decode raw entries in engine ranking order.

    Raises:
        MalformedAnalysisError: an entry is malformed and policy is FAIL.
    """
    analyses: list[LexicalAnalysis] = []
    for entry in entries:
        try:
            analyses.append(decode_entry(entry, raw_line=raw_line, table=table))
        except MalformedAnalysisError as e:
            if policy is MalformedPolicy.FAIL:
                raise
            logger.warning(
                "Skipping malformed analysis entry",
                extra={"entry": e.entry, "raw_line": raw_line, "offset": e.offset, "reason": e.args[0]},
            )
    return analyses


def decode_entry(
    entry: RawEntry,
    *,
    raw_line: str | None = None,
    table: GrammemeTable = DEFAULT_GRAMMEME_TABLE,
) -> LexicalAnalysis:
    """Decode a single ``lemma[:weight]=code`` entry."""
    def malformed(reason: str) -> MalformedAnalysisError:
        return MalformedAnalysisError(reason, entry=entry.text, raw_line=raw_line, offset=entry.offset)

    text = entry.text.strip()
    if not text:
        raise malformed("Empty analysis entry")

    split_at = find_unescaped(text, CODE_SEPARATOR)
    if split_at < 0:
        head, code = text, None
    else:
        head, code = text[:split_at], text[split_at + 1:]

    head, weight = _split_weight(head)
    lex, guessed = _strip_guess_marker(unescape(head))
    if not lex:
        raise malformed("Empty lemma")

    if code is None:
        if not guessed:
            raise malformed("Missing grammeme code")
        return LexicalAnalysis(lex=lex, grammemes=GrammemeSet.unknown(), weight=weight, guessed=True)
    if not code.strip():
        raise malformed("Empty grammeme code")

    return build_analysis(lex, code, weight=weight, guessed=guessed, table=table)


def build_analysis(
    lex: str,
    code: str,
    *,
    weight: float | None = None,
    guessed: bool = False,
    table: GrammemeTable = DEFAULT_GRAMMEME_TABLE,
) -> LexicalAnalysis:
    """Assemble a LexicalAnalysis from already separated fields."""
    return LexicalAnalysis(
        lex=lex,
        grammemes=decode_grammemes(code, table),
        weight=weight,
        guessed=guessed,
    )


# ---------------------------------------------------------------------------
# Entry helpers
# ---------------------------------------------------------------------------

def _split_weight(head: str) -> tuple[str, float | None]:
    """Split an optional ``:<weight>`` suffix off the lemma field."""
    at = find_unescaped(head, WEIGHT_SEPARATOR, last=True)
    if at < 0:
        return head, None
    try:
        weight = float(head[at + 1:])
    except ValueError:
        return head, None
    return head[:at], weight


def _strip_guess_marker(lex: str) -> tuple[str, bool]:
    stripped = lex.rstrip(GUESS_MARKER)
    return stripped, stripped != lex
