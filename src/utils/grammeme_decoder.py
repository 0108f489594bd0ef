"""Grammeme decoder: mystem grammeme code string → GrammemeSet.

Code grammar: ``<pos>[,<lexeme feature>]*[=<form features>]``, where the
form part may list ambiguous alternatives as ``(вин,мн|род,ед)``. Every
alternative's values are kept, grouped per category.
"""

import logging
import re

from domain.model.grammeme import Category, GrammemeSet, PartOfSpeech
from domain.model.grammeme_table import DEFAULT_GRAMMEME_TABLE, GrammemeTable

logger = logging.getLogger(__name__)

UNKNOWN_CODE = '?'

_SEGMENT_DELIMITERS = re.compile(r"[=,|()]")


def decode_grammemes(raw: str, table: GrammemeTable = DEFAULT_GRAMMEME_TABLE) -> GrammemeSet:
    """Decode a grammeme code string.

    Never raises for string input. A missing or ``?`` code yields the
    Unknown part of speech; codes the table does not know are kept in
    ``GrammemeSet.unrecognized``.
    """
    code = raw.strip()
    segments = [segment.strip() for segment in _SEGMENT_DELIMITERS.split(code)]
    segments = [segment for segment in segments if segment]
    if not segments or segments[0] == UNKNOWN_CODE:
        return GrammemeSet.unknown(code)

    head, *rest = segments
    unrecognized: list[str] = []

    feature = table.lookup(head)
    if feature is not None and feature.category is Category.PART_OF_SPEECH:
        pos = feature.value
    else:
        pos = PartOfSpeech.UNKNOWN
        unrecognized.append(head)

    features: dict[Category, set] = {}
    for segment in rest:
        feature = table.lookup(segment)
        if feature is None or feature.category is Category.PART_OF_SPEECH:
            unrecognized.append(segment)
            continue
        features.setdefault(feature.category, set()).add(feature.value)

    if unrecognized:
        logger.debug(
            "Unrecognized grammeme codes",
            extra={"code": code, "unrecognized": unrecognized},
        )

    return GrammemeSet(
        pos=pos,
        features=features,
        unrecognized=tuple(dict.fromkeys(unrecognized)),
        raw=code,
    )
