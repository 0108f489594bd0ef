"""Analysis domain models."""

from dataclasses import dataclass
from typing import Any, Iterator

from domain.model.grammeme import GrammemeSet, PartOfSpeech


@dataclass(frozen=True)
class LexicalAnalysis:
    """One candidate interpretation of a surface word."""
    lex: str
    grammemes: GrammemeSet
    weight: float | None = None
    # Lemma was guessed by the engine rather than found in its dictionary
    guessed: bool = False

    @classmethod
    def unknown(cls, lex: str) -> 'LexicalAnalysis':
        return cls(lex=lex, grammemes=GrammemeSet.unknown())

    @property
    def pos(self) -> PartOfSpeech:
        return self.grammemes.pos

    @property
    def is_unknown(self) -> bool:
        return self.grammemes.pos is PartOfSpeech.UNKNOWN

    def to_dict(self) -> dict[str, Any]:
        data = {'lex': self.lex, **self.grammemes.to_dict(), 'weight': self.weight}
        if self.guessed:
            data['guessed'] = True
        return data


@dataclass(frozen=True)
class WordResult:
    """A surface token and its ranked analyses (index 0 is the engine's best guess).

    The analyses sequence is never empty: a token the engine could not
    analyze carries the single Unknown sentinel analysis instead.
    """
    text: str
    analyses: tuple[LexicalAnalysis, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.analyses, tuple):
            object.__setattr__(self, 'analyses', tuple(self.analyses))
        if not self.analyses:
            raise ValueError(f"WordResult for {self.text!r} must have at least one analysis")

    @classmethod
    def unanalyzed(cls, text: str) -> 'WordResult':
        """Result for a token the engine returned no analyses for."""
        return cls(text=text, analyses=(LexicalAnalysis.unknown(text),))

    @property
    def best(self) -> LexicalAnalysis:
        return self.analyses[0]

    @property
    def is_ambiguous(self) -> bool:
        return len(self.analyses) > 1

    def to_dict(self) -> dict[str, Any]:
        return {
            'text': self.text,
            'analyses': [analysis.to_dict() for analysis in self.analyses],
        }


@dataclass(frozen=True)
class AnalysisBatch:
    """Word results for one request, positionally aligned with the submitted tokens."""
    words: tuple[WordResult, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.words, tuple):
            object.__setattr__(self, 'words', tuple(self.words))

    def __len__(self) -> int:
        return len(self.words)

    def __iter__(self) -> Iterator[WordResult]:
        return iter(self.words)

    def __getitem__(self, index: int) -> WordResult:
        return self.words[index]

    def lemmas(self) -> list[str]:
        """Best lemma for every word, in order."""
        return [word.best.lex for word in self.words]

    def to_list(self) -> list[dict[str, Any]]:
        return [word.to_dict() for word in self.words]
