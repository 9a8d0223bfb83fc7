"""
Passage Model - resolved passages and conversational session state

These dataclasses are what the resolver hands back to the presenting app:
- Passage: one resolved book/chapter/verse range
- ConversationContext: the last fully resolved passage, for anaphoric input
- SessionState: context plus the last successfully resolved raw input
- TierOutcome / ResolutionResult: explicit per-tier and overall results

Design principles:
- Immutable state; a successful resolution returns a new SessionState
- JSON-serializable (camelCase keys) for IPC with the presentation app
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any


# ============================================================================
# CONFIGURATION
# ============================================================================

DEFAULT_TRANSLATION = "default"


# ============================================================================
# PASSAGE
# ============================================================================

@dataclass(frozen=True)
class Passage:
    """A resolved passage: one chapter, a contiguous verse range."""
    book: str  # App identifier from the BookCatalog
    full_book_name: str  # Canonical name, e.g. "1 Corinthians"
    chapter: int
    start_verse: int
    end_verse: int
    translation: str = DEFAULT_TRANSLATION

    def __post_init__(self):
        if self.chapter < 1:
            raise ValueError(f"Chapter must be >= 1, got {self.chapter}")
        if self.start_verse < 1:
            raise ValueError(f"Start verse must be >= 1, got {self.start_verse}")
        if self.end_verse < self.start_verse:
            raise ValueError(
                f"End verse {self.end_verse} precedes start verse {self.start_verse}"
            )

    @property
    def reference(self) -> str:
        """Standard citation, e.g. "John 3:16" or "John 3:16-18"."""
        if self.end_verse == self.start_verse:
            return f"{self.book} {self.chapter}:{self.start_verse}"
        return f"{self.book} {self.chapter}:{self.start_verse}-{self.end_verse}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'book': self.book,
            'fullBookName': self.full_book_name,
            'chapter': self.chapter,
            'startVerse': self.start_verse,
            'endVerse': self.end_verse,
            'translation': self.translation,
            'reference': self.reference,
        }


# ============================================================================
# SESSION STATE
# ============================================================================

@dataclass(frozen=True)
class ConversationContext:
    """
    The most recently resolved passage.

    Either every field is None (nothing resolved yet) or every field is set.
    """
    book: Optional[str] = None  # Full book name of the passage
    chapter: Optional[int] = None
    verse: Optional[int] = None
    full_reference: Optional[str] = None  # "<full book name> <chapter>:<verse>"

    @classmethod
    def from_passage(cls, passage: Passage) -> 'ConversationContext':
        book = passage.full_book_name or passage.book
        return cls(
            book=book,
            chapter=passage.chapter,
            verse=passage.start_verse,
            full_reference=f"{book} {passage.chapter}:{passage.start_verse}",
        )

    @property
    def is_empty(self) -> bool:
        return self.book is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'book': self.book,
            'chapter': self.chapter,
            'verse': self.verse,
            'fullReference': self.full_reference,
        }


@dataclass(frozen=True)
class SessionState:
    """Everything the resolver remembers between utterances."""
    context: ConversationContext = field(default_factory=ConversationContext)
    legacy_reference: Optional[str] = None  # Last successfully resolved raw input

    def advance(self, passage: Passage, raw_input: str) -> 'SessionState':
        """State after a successful resolution whose first passage is `passage`."""
        return SessionState(
            context=ConversationContext.from_passage(passage),
            legacy_reference=raw_input,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'context': self.context.to_dict(),
            'legacyReference': self.legacy_reference,
        }


# ============================================================================
# OUTCOMES
# ============================================================================

class FailureKind(Enum):
    """Why a tier produced no passage. None of these reach the caller as errors."""
    NO_MATCH = "no_match"
    INVALID_NUMERIC_TOKEN = "invalid_numeric_token"
    UPSTREAM_GRAMMAR_FAILURE = "upstream_grammar_failure"
    AMBIGUOUS_BOOK_NAME = "ambiguous_book_name"


@dataclass
class TierOutcome:
    """Result of one resolver tier: passages, a rewritten candidate, or a failure."""
    tier: str
    passages: List[Passage] = field(default_factory=list)
    candidate: Optional[str] = None  # Reference string to run through the direct stages
    failure: Optional[FailureKind] = None
    detail: str = ""

    @property
    def matched(self) -> bool:
        return bool(self.passages)

    @classmethod
    def success(cls, tier: str, passages: List[Passage]) -> 'TierOutcome':
        return cls(tier=tier, passages=list(passages))

    @classmethod
    def rewrite(cls, tier: str, candidate: str) -> 'TierOutcome':
        return cls(tier=tier, candidate=candidate)

    @classmethod
    def failed(cls, tier: str, failure: FailureKind = FailureKind.NO_MATCH,
               detail: str = "") -> 'TierOutcome':
        return cls(tier=tier, failure=failure, detail=detail)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'tier': self.tier,
            'matched': self.matched,
        }
        if self.candidate is not None:
            result['candidate'] = self.candidate
        if self.failure is not None:
            result['failure'] = self.failure.value
        if self.detail:
            result['detail'] = self.detail
        return result


@dataclass
class ResolutionResult:
    """Overall result of resolving one utterance."""
    passages: Optional[List[Passage]]  # None when nothing resolved
    state: SessionState  # State to pass to the next resolution
    tier: Optional[str] = None  # Tier that produced the passages
    outcomes: List[TierOutcome] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return bool(self.passages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'passages': [p.to_dict() for p in self.passages] if self.passages else None,
            'tier': self.tier,
            'context': self.state.context.to_dict(),
        }
