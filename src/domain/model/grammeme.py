"""Grammeme value objects.

Typed enumerations for every grammatical category mystem reports, plus the
GrammemeSet bundle the decoder produces for one analysis.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class Category(str, Enum):
    """Grammatical category a grammeme belongs to."""
    PART_OF_SPEECH = 'part_of_speech'
    CASE = 'case'
    TENSE = 'tense'
    NUMBER = 'number'
    MOOD = 'mood'
    ADJECTIVE_FORM = 'adjective_form'
    DEGREE = 'degree'
    PERSON = 'person'
    GENDER = 'gender'
    ASPECT = 'aspect'
    VOICE = 'voice'
    ANIMACY = 'animacy'
    TRANSITIVITY = 'transitivity'
    OTHER = 'other'


class PartOfSpeech(str, Enum):
    """Часть речи."""
    ADJECTIVE = 'adjective'
    ADVERB = 'adverb'
    ADVERB_PRONOMINAL = 'adverb_pronominal'
    ADJECTIVE_NUMERAL = 'adjective_numeral'
    ADJECTIVE_PRONOUN = 'adjective_pronoun'
    COMPOSITE = 'composite'
    CONJUNCTION = 'conjunction'
    INTERJECTION = 'interjection'
    NUMERAL = 'numeral'
    PARTICLE = 'particle'
    PREPOSITION = 'preposition'
    NOUN = 'noun'
    NOUN_PRONOUN = 'noun_pronoun'
    VERB = 'verb'
    # Engine produced no analysis, or a code this table does not know
    UNKNOWN = 'unknown'


class Case(str, Enum):
    """Падеж."""
    NOMINATIVE = 'nominative'
    GENITIVE = 'genitive'
    DATIVE = 'dative'
    ACCUSATIVE = 'accusative'
    INSTRUMENTAL = 'instrumental'
    PREPOSITIONAL = 'prepositional'
    PARTITIVE = 'partitive'
    LOCATIVE = 'locative'
    VOCATIVE = 'vocative'


class Tense(str, Enum):
    """Время глагола."""
    PRESENT = 'present'
    NON_PAST = 'non_past'
    PAST = 'past'


class Number(str, Enum):
    """Число."""
    SINGULAR = 'singular'
    PLURAL = 'plural'


class Mood(str, Enum):
    """Наклонение и неличные формы глагола."""
    GERUND = 'gerund'
    INFINITIVE = 'infinitive'
    PARTICIPLE = 'participle'
    INDICATIVE = 'indicative'
    IMPERATIVE = 'imperative'


class AdjectiveForm(str, Enum):
    """Форма прилагательного."""
    SHORT = 'short'
    LONG = 'long'
    POSSESSIVE = 'possessive'


class Degree(str, Enum):
    """Степень сравнения."""
    SUPERLATIVE = 'superlative'
    COMPARATIVE = 'comparative'


class Person(str, Enum):
    """Лицо глагола."""
    FIRST = 'first'
    SECOND = 'second'
    THIRD = 'third'


class Gender(str, Enum):
    """Род."""
    MASCULINE = 'masculine'
    FEMININE = 'feminine'
    NEUTER = 'neuter'


class Aspect(str, Enum):
    """Вид глагола."""
    PERFECTIVE = 'perfective'
    IMPERFECTIVE = 'imperfective'


class Voice(str, Enum):
    """Залог."""
    ACTIVE = 'active'
    PASSIVE = 'passive'


class Animacy(str, Enum):
    """Одушевленность."""
    ANIMATE = 'animate'
    INANIMATE = 'inanimate'


class Transitivity(str, Enum):
    """Переходность глагола."""
    TRANSITIVE = 'transitive'
    INTRANSITIVE = 'intransitive'


class Other(str, Enum):
    """Прочие обозначения."""
    PARENTHESIS = 'parenthesis'
    GEO = 'geo'
    AWKWARD = 'awkward'
    PROPER_NAME = 'proper_name'
    DISTORTED = 'distorted'
    COMMON_GENDER = 'common_gender'
    OBSCENE = 'obscene'
    PATRONYMIC = 'patronymic'
    PREDICATIVE = 'predicative'
    INFORMAL = 'informal'
    RARE = 'rare'
    ABBREVIATION = 'abbreviation'
    OBSOLETE = 'obsolete'
    FAMILY_NAME = 'family_name'


@dataclass(frozen=True)
class GrammemeSet:
    """Decoded grammatical features of one analysis (Value Object).

    ``pos`` is always set. Secondary features are grouped per category as
    frozensets, so an ambiguous form (``(вин,мн|род,ед)``) keeps every
    candidate value. Codes the table does not know land in
    ``unrecognized`` in order of first appearance; ``raw`` is the code
    string exactly as the engine sent it.
    """

    pos: PartOfSpeech
    features: Mapping[Category, frozenset] = field(default_factory=lambda: MappingProxyType({}))
    unrecognized: tuple[str, ...] = ()
    raw: str = ''

    def __post_init__(self) -> None:
        # Freeze mutable dict passed at construction time
        if not isinstance(self.features, MappingProxyType):
            frozen = {category: frozenset(values) for category, values in self.features.items() if values}
            object.__setattr__(self, 'features', MappingProxyType(frozen))

    def __hash__(self) -> int:
        # MappingProxyType is unhashable; hash its frozen items instead
        return hash((self.pos, frozenset(self.features.items()), self.unrecognized, self.raw))

    @classmethod
    def unknown(cls, raw: str = '') -> 'GrammemeSet':
        """Sentinel set for a token the engine could not analyze."""
        return cls(pos=PartOfSpeech.UNKNOWN, raw=raw)

    def values(self, category: Category) -> frozenset:
        """All decoded values for ``category``; empty when absent."""
        if category is Category.PART_OF_SPEECH:
            return frozenset({self.pos})
        return self.features.get(category, frozenset())

    def one(self, category: Category) -> Enum | None:
        """The single value for ``category``, or None if absent or ambiguous."""
        values = self.values(category)
        if len(values) == 1:
            return next(iter(values))
        return None

    def has(self, value: Enum) -> bool:
        return value is self.pos or any(value in values for values in self.features.values())

    @property
    def is_ambiguous(self) -> bool:
        return any(len(values) > 1 for values in self.features.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            'pos': self.pos.value,
            'features': {
                category.value: sorted(value.value for value in values)
                for category, values in self.features.items()
            },
            'unrecognized': list(self.unrecognized),
            'raw': self.raw,
        }
