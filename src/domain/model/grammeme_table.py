"""Grammeme Table: mystem grammeme codes mapped to typed features.

The catalog below is the single source of truth: one entry per category,
listing every code mystem emits for it in both the Russian (default) and
English (``--eng-gr``) notations. GrammemeTable indexes a catalog once and
is never mutated afterwards, so one instance can be shared by any number
of decoders and threads. Supporting a newer engine means passing an
extended catalog, not touching the decoder.
"""

from types import MappingProxyType
from typing import Iterator, Mapping, NamedTuple

from domain.model.grammeme import (
    AdjectiveForm,
    Animacy,
    Aspect,
    Case,
    Category,
    Degree,
    Gender,
    Mood,
    Number,
    Other,
    PartOfSpeech,
    Person,
    Tense,
    Transitivity,
    Voice,
)


class Feature(NamedTuple):
    """A decoded grammeme: its category and typed value."""
    category: Category
    value: object


GrammemeCatalog = Mapping[Category, Mapping[str, object]]


GRAMMEME_CATALOG: GrammemeCatalog = MappingProxyType({
    Category.PART_OF_SPEECH: {
        'A': PartOfSpeech.ADJECTIVE,
        'ADV': PartOfSpeech.ADVERB,
        'ADVPRO': PartOfSpeech.ADVERB_PRONOMINAL,
        'ANUM': PartOfSpeech.ADJECTIVE_NUMERAL,
        'APRO': PartOfSpeech.ADJECTIVE_PRONOUN,
        'COM': PartOfSpeech.COMPOSITE,
        'CONJ': PartOfSpeech.CONJUNCTION,
        'INTJ': PartOfSpeech.INTERJECTION,
        'NUM': PartOfSpeech.NUMERAL,
        'PART': PartOfSpeech.PARTICLE,
        'PR': PartOfSpeech.PREPOSITION,
        'S': PartOfSpeech.NOUN,
        'SPRO': PartOfSpeech.NOUN_PRONOUN,
        'V': PartOfSpeech.VERB,
    },
    Category.CASE: {
        'им': Case.NOMINATIVE, 'nom': Case.NOMINATIVE,
        'род': Case.GENITIVE, 'gen': Case.GENITIVE,
        'дат': Case.DATIVE, 'dat': Case.DATIVE,
        'вин': Case.ACCUSATIVE, 'acc': Case.ACCUSATIVE,
        'твор': Case.INSTRUMENTAL, 'ins': Case.INSTRUMENTAL,
        'пр': Case.PREPOSITIONAL, 'abl': Case.PREPOSITIONAL,
        'парт': Case.PARTITIVE, 'part': Case.PARTITIVE,
        'местн': Case.LOCATIVE, 'loc': Case.LOCATIVE,
        'зват': Case.VOCATIVE, 'voc': Case.VOCATIVE,
    },
    Category.TENSE: {
        'наст': Tense.PRESENT, 'praes': Tense.PRESENT,
        'непрош': Tense.NON_PAST, 'inpraes': Tense.NON_PAST,
        'прош': Tense.PAST, 'praet': Tense.PAST,
    },
    Category.NUMBER: {
        'ед': Number.SINGULAR, 'sg': Number.SINGULAR,
        'мн': Number.PLURAL, 'pl': Number.PLURAL,
    },
    Category.MOOD: {
        'деепр': Mood.GERUND, 'ger': Mood.GERUND,
        'инф': Mood.INFINITIVE, 'inf': Mood.INFINITIVE,
        'прич': Mood.PARTICIPLE, 'partcp': Mood.PARTICIPLE,
        'изъяв': Mood.INDICATIVE, 'indic': Mood.INDICATIVE,
        'пов': Mood.IMPERATIVE, 'imper': Mood.IMPERATIVE,
    },
    Category.ADJECTIVE_FORM: {
        'кр': AdjectiveForm.SHORT, 'brev': AdjectiveForm.SHORT,
        'полн': AdjectiveForm.LONG, 'plen': AdjectiveForm.LONG,
        'притяж': AdjectiveForm.POSSESSIVE, 'poss': AdjectiveForm.POSSESSIVE,
    },
    Category.DEGREE: {
        'прев': Degree.SUPERLATIVE, 'supr': Degree.SUPERLATIVE,
        'срав': Degree.COMPARATIVE, 'comp': Degree.COMPARATIVE,
    },
    Category.PERSON: {
        '1-л': Person.FIRST, '1p': Person.FIRST,
        '2-л': Person.SECOND, '2p': Person.SECOND,
        '3-л': Person.THIRD, '3p': Person.THIRD,
    },
    Category.GENDER: {
        'муж': Gender.MASCULINE, 'm': Gender.MASCULINE,
        'жен': Gender.FEMININE, 'f': Gender.FEMININE,
        'сред': Gender.NEUTER, 'n': Gender.NEUTER,
    },
    Category.ASPECT: {
        'сов': Aspect.PERFECTIVE, 'pf': Aspect.PERFECTIVE,
        'несов': Aspect.IMPERFECTIVE, 'ipf': Aspect.IMPERFECTIVE,
    },
    Category.VOICE: {
        'действ': Voice.ACTIVE, 'act': Voice.ACTIVE,
        'страд': Voice.PASSIVE, 'pass': Voice.PASSIVE,
    },
    Category.ANIMACY: {
        'од': Animacy.ANIMATE, 'anim': Animacy.ANIMATE,
        'неод': Animacy.INANIMATE, 'inan': Animacy.INANIMATE,
    },
    Category.TRANSITIVITY: {
        'пе': Transitivity.TRANSITIVE, 'tran': Transitivity.TRANSITIVE,
        'нп': Transitivity.INTRANSITIVE, 'intr': Transitivity.INTRANSITIVE,
    },
    Category.OTHER: {
        'вводн': Other.PARENTHESIS, 'parenth': Other.PARENTHESIS,
        'гео': Other.GEO, 'geo': Other.GEO,
        'затр': Other.AWKWARD, 'awkw': Other.AWKWARD,
        'имя': Other.PROPER_NAME, 'persn': Other.PROPER_NAME,
        'искаж': Other.DISTORTED, 'dist': Other.DISTORTED,
        'мж': Other.COMMON_GENDER, 'mf': Other.COMMON_GENDER,
        'обсц': Other.OBSCENE, 'obsc': Other.OBSCENE,
        'отч': Other.PATRONYMIC, 'patrn': Other.PATRONYMIC,
        'прдк': Other.PREDICATIVE, 'praed': Other.PREDICATIVE,
        'разг': Other.INFORMAL, 'inform': Other.INFORMAL,
        'редк': Other.RARE, 'rare': Other.RARE,
        'сокр': Other.ABBREVIATION, 'abbr': Other.ABBREVIATION,
        'устар': Other.OBSOLETE, 'obsol': Other.OBSOLETE,
        'фам': Other.FAMILY_NAME, 'famn': Other.FAMILY_NAME,
    },
})


class GrammemeTable:
    """Immutable code → Feature index built from a catalog.

    Lookups are total: any string is accepted and unknown codes return
    None. Two categories claiming the same code is a catalog error and is
    rejected at construction time.
    """

    def __init__(self, catalog: GrammemeCatalog):
        index: dict[str, Feature] = {}
        for category, codes in catalog.items():
            category = Category(category)
            for code, value in codes.items():
                existing = index.get(code)
                if existing is not None and existing != (category, value):
                    raise ValueError(
                        f"Grammeme code {code!r} mapped to both "
                        f"{existing.category.value} and {category.value}"
                    )
                index[code] = Feature(category, value)
        self._index: Mapping[str, Feature] = MappingProxyType(index)

    def lookup(self, code: str) -> Feature | None:
        """Return the Feature for ``code``, or None if the code is unknown."""
        return self._index.get(code)

    def extend(self, catalog: GrammemeCatalog) -> 'GrammemeTable':
        """Build a new table with ``catalog`` merged over this one's codes."""
        merged: dict[Category, dict[str, object]] = {}
        for code, feature in self._index.items():
            merged.setdefault(feature.category, {})[code] = feature.value
        for category, codes in catalog.items():
            merged.setdefault(Category(category), {}).update(codes)
        return GrammemeTable(merged)

    def codes(self, category: Category | None = None) -> frozenset[str]:
        if category is None:
            return frozenset(self._index)
        return frozenset(code for code, feature in self._index.items() if feature.category is category)

    def __contains__(self, code: object) -> bool:
        return code in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)


DEFAULT_GRAMMEME_TABLE = GrammemeTable(GRAMMEME_CATALOG)
