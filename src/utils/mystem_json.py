"""Decoder for mystem ``--format json`` output.

Each response line is a JSON array with one object per token:

    [{"text": "кошка", "analysis": [{"lex": "кошка", "wt": 1, "gr": "S,жен,неод=им,ед"}]},
     {"text": "\\n"}]

Objects without an ``analysis`` key whose text is whitespace are the
engine echoing separators and are dropped. An empty ``analysis`` list
means the token could not be analyzed.
"""

import json
import logging

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from domain.model.analysis import LexicalAnalysis, WordResult
from domain.model.errors import MalformedAnalysisError, ProtocolFramingError
from domain.model.grammeme import GrammemeSet
from domain.model.grammeme_table import DEFAULT_GRAMMEME_TABLE, GrammemeTable
from utils.analysis_decoder import DEFAULT_MALFORMED_POLICY, MalformedPolicy, build_analysis
from utils.response_tokenizer import byte_offset

logger = logging.getLogger(__name__)

# mystem marks lemmas it guessed rather than found in its dictionary
GUESSED_QUALITY = 'bastard'


class JsonAnalysis(BaseModel):
    """One entry of a token's ``analysis`` list."""
    lex: str
    gr: str = ''
    wt: float | None = Field(None, description="Relative weight (--weight)")
    qual: str | None = None


class JsonToken(BaseModel):
    """One token object in a response array."""
    text: str
    analysis: list[JsonAnalysis] | None = None


_RESPONSE_ADAPTER = TypeAdapter(list[JsonToken])


def decode_json_line(
    line: str,
    table: GrammemeTable = DEFAULT_GRAMMEME_TABLE,
    policy: MalformedPolicy = DEFAULT_MALFORMED_POLICY,
) -> list[WordResult]:
    """Decode one JSON output line into WordResults, in engine order.

    Raises:
        ProtocolFramingError: invalid JSON, schema violation, or a token
            none of whose analyses could be decoded.
    """
    raw = line.rstrip('\r\n')
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ProtocolFramingError(
            f"Invalid JSON response: {e.msg}", raw_line=raw, offset=byte_offset(raw, e.pos),
        ) from e

    try:
        tokens = _RESPONSE_ADAPTER.validate_python(payload)
    except ValidationError as e:
        error = e.errors()[0]
        raise ProtocolFramingError(
            f"Unexpected JSON response shape: {error['msg']}", raw_line=raw,
            offset=_validation_offset(raw, payload, error['loc']),
        ) from e

    results: list[WordResult] = []
    for token in tokens:
        if token.analysis is None:
            if token.text.strip():
                results.append(WordResult.unanalyzed(token.text))
            continue
        if not token.analysis:
            results.append(WordResult.unanalyzed(token.text))
            continue
        analyses = _decode_token_analyses(token, raw, table, policy)
        if not analyses:
            raise ProtocolFramingError(
                "No decodable analyses for token", raw_line=raw, offset=_token_offset(raw, token.text),
            )
        results.append(WordResult(text=token.text, analyses=tuple(analyses)))
    return results


def _decode_token_analyses(
    token: JsonToken,
    raw: str,
    table: GrammemeTable,
    policy: MalformedPolicy,
) -> list[LexicalAnalysis]:
    analyses: list[LexicalAnalysis] = []
    for item in token.analysis:
        guessed = item.qual == GUESSED_QUALITY
        if not item.lex:
            error = MalformedAnalysisError(
                "Empty lemma", entry=item.model_dump_json(), raw_line=raw,
                offset=_token_offset(raw, token.text),
            )
            if policy is MalformedPolicy.FAIL:
                raise error
            logger.warning(
                "Skipping malformed analysis entry",
                extra={"entry": error.entry, "raw_line": raw, "reason": "Empty lemma"},
            )
            continue
        if not item.gr.strip():
            analyses.append(LexicalAnalysis(
                lex=item.lex, grammemes=GrammemeSet.unknown(), weight=item.wt, guessed=guessed,
            ))
            continue
        analyses.append(build_analysis(item.lex, item.gr, weight=item.wt, guessed=guessed, table=table))
    return analyses


def _token_offset(raw: str, text: str) -> int | None:
    index = raw.find(json.dumps(text, ensure_ascii=False))
    if index < 0:
        return None
    return byte_offset(raw, index)


def _validation_offset(raw: str, payload: object, loc: tuple) -> int:
    """Byte offset of the token object a schema error points into.

    Falls back to the start of the line when the error concerns the
    top-level value or the offending token has no locatable text.
    """
    if not loc or not isinstance(loc[0], int) or not isinstance(payload, list):
        return 0
    item = payload[loc[0]]
    if isinstance(item, dict) and isinstance(item.get('text'), str):
        offset = _token_offset(raw, item['text'])
        if offset is not None:
            return offset
    return 0
