"""
Review Text Classifier

Keyword-lexicon classification shared by the persona and core-fun analyzers.
A Lexicon maps categories, in declaration order, to KeywordRules:

- literal keywords, matched case-insensitively (str.casefold) either as
  substrings (default; Korean particles attach directly to nouns) or bounded
  by non-word characters (MatchMode.WORD)
- regular expressions (pattern=True), compiled once and searched against
  the casefolded text

A rule contributes its weight once per text when present; repeated
occurrences do not add up. Classification is multi-label: every category gets
a score, and primary_category() picks the highest, with ties going to the
category declared first.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from market_signals.core.errors import ConfigError
from market_signals.models.enums import MatchMode
from market_signals.models.schemas import CategoryClassification


@dataclass(frozen=True)
class KeywordRule:
    """One lexicon entry: a literal keyword or a regex, and its weight."""

    term: str
    weight: float = 1.0
    pattern: bool = False


RuleLike = Union[str, KeywordRule]

# (rule, predicate over casefolded text)
_CompiledRule = Tuple[KeywordRule, Callable[[str], bool]]


def category_value(category: Any) -> str:
    """Serialized name of a lexicon category (enum value or str)."""
    if isinstance(category, Enum):
        return str(category.value)
    return str(category)


class Lexicon:
    """
    Immutable category -> rules table with pre-compiled matchers.

    Args:
        name: Lexicon name used in error messages.
        categories: Rules per category. Plain strings are keyword rules with
            weight 1. Iteration order is kept and breaks score ties.
        match_mode: How literal keywords are matched.

    Raises:
        ConfigError: On an empty lexicon or term, a negative or non-finite
            weight, or a regex that does not compile.
    """

    def __init__(
        self,
        name: str,
        categories: Mapping[Any, Sequence[RuleLike]],
        match_mode: MatchMode = MatchMode.SUBSTRING,
    ) -> None:
        if not categories:
            raise ConfigError(f"{name}: lexicon has no categories")

        self.name = name
        self.match_mode = match_mode
        self._categories: Tuple[Tuple[Any, Tuple[_CompiledRule, ...]], ...] = tuple(
            (category, tuple(self._compile(rule) for rule in rules))
            for category, rules in categories.items()
        )

    def _compile(self, rule: RuleLike) -> _CompiledRule:
        if isinstance(rule, str):
            rule = KeywordRule(rule)

        if not rule.term:
            raise ConfigError(f"{self.name}: empty rule term")
        if not math.isfinite(rule.weight) or rule.weight < 0:
            raise ConfigError(f"{self.name}: weight for {rule.term!r} must be finite and >= 0")

        if rule.pattern:
            try:
                regex = re.compile(rule.term, re.IGNORECASE)
            except re.error as exc:
                raise ConfigError(f"{self.name}: invalid pattern {rule.term!r}: {exc}") from exc
            return rule, lambda text: regex.search(text) is not None

        needle = rule.term.casefold()
        if self.match_mode == MatchMode.WORD:
            bounded = re.compile(r"(?<!\w)" + re.escape(needle) + r"(?!\w)")
            return rule, lambda text: bounded.search(text) is not None
        return rule, lambda text: needle in text

    @property
    def categories(self) -> Tuple[Any, ...]:
        return tuple(category for category, _ in self._categories)

    def rules(self, category: Any) -> Tuple[KeywordRule, ...]:
        for declared, compiled in self._categories:
            if declared == category:
                return tuple(rule for rule, _ in compiled)
        raise KeyError(category)

    def classify(self, text: str) -> List[CategoryClassification]:
        folded = (text or "").casefold()
        blank = not folded.strip()

        results: List[CategoryClassification] = []
        for category, compiled in self._categories:
            matched: List[str] = []
            score = 0.0
            if not blank:
                for rule, predicate in compiled:
                    if predicate(folded):
                        matched.append(rule.term)
                        score += rule.weight
            results.append(CategoryClassification(
                category=category_value(category),
                score=score,
                matchedKeywords=matched,
            ))
        return results

    def __repr__(self) -> str:
        return (
            f"Lexicon(name={self.name!r}, match_mode={self.match_mode.value!r}, "
            f"categories={[category_value(c) for c in self.categories]!r})"
        )


def classify_text(text: str, lexicon: Lexicon) -> List[CategoryClassification]:
    """
    Score text against every category of the lexicon.

    Returns one CategoryClassification per declared category, in declaration
    order. Empty or whitespace-only text scores 0 everywhere.

    Example:
        >>> lexicon = Lexicon("demo", {"story": ["plot"], "audio": ["music"]})
        >>> [c.score for c in classify_text("Great plot, great PLOT", lexicon)]
        [1.0, 0.0]
    """
    return lexicon.classify(text)


def primary_category(classifications: Sequence[CategoryClassification]) -> Optional[str]:
    """Highest-scoring category; earliest wins ties, None when nothing matched."""
    best: Optional[CategoryClassification] = None
    for classification in classifications:
        if best is None or classification.score > best.score:
            best = classification
    if best is None or best.score <= 0:
        return None
    return best.category
