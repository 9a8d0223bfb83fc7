"""
Scripture Reference Resolver

Turns one spoken or typed utterance into passages, using what was said
before to fill in missing book and chapter:

1. Direct stages (on normalized text): context chapter+verse, verse-only,
   chapter-only and combined-digit detectors, then the full grammar
2. Fallbacks (on raw text), only when the direct stages find nothing:
   grammar context retry, legacy context retry, regex extraction
   Fallbacks decline when the utterance names its own book.

Navigation commands ("next verse", "go back") and numbered-list talk
("point number 3") are turned away before any stage runs.

A fallback never returns passages itself. It produces a canonical reference
string that is run once through the direct stages, so the chain cannot
recurse. Each stage reports a TierOutcome; nothing is raised to the caller.

Session state is an immutable SessionState passed in and returned. A
ResolverSession holds it for a single live session.
"""

import sys
from typing import List, Optional

from book_catalog import BookCatalog, DEFAULT_CATALOG, is_valid_chapter, is_valid_verse
from passage_model import (
    ConversationContext,
    FailureKind,
    Passage,
    ResolutionResult,
    SessionState,
    TierOutcome,
)
from pattern_detectors import (
    construct_reference_from_extracted,
    detect_context_chapter_verse,
    extract_chapter_and_verse,
    extract_verse_list,
    find_combined_digit_references,
    is_chapter_only_reference,
    is_likely_numbered_list,
    is_navigation_command,
    is_verse_only_reference,
)
from reference_grammar import DEFAULT_GRAMMAR, ReferenceGrammar, passages_from_parse
from reference_normalizer import convert_to_number, normalize_reference
from verse_parser import verses_to_ranges


# ============================================================================
# STRATEGIES
# ============================================================================

class ResolverStrategy:
    """One resolution tier. Subclasses implement attempt()."""

    name = 'strategy'

    def __init__(self, catalog: BookCatalog, grammar: ReferenceGrammar):
        self.catalog = catalog
        self.grammar = grammar

    def attempt(self, text: str, state: SessionState) -> TierOutcome:
        raise NotImplementedError

    def _no_match(self, detail: str = "") -> TierOutcome:
        return TierOutcome.failed(self.name, FailureKind.NO_MATCH, detail)

    def _names_own_book(self, text: str) -> bool:
        return self.grammar.mentions_book(normalize_reference(text))

    def _passage(self, full_book_name: str, chapter: int,
                 start_verse: int, end_verse: int) -> TierOutcome:
        """Map the book through the catalog and build a single-passage outcome."""
        book_id = self.catalog.canonical_id(full_book_name)
        if book_id is None:
            return TierOutcome.failed(
                self.name, FailureKind.AMBIGUOUS_BOOK_NAME,
                f"{full_book_name!r} is not in the book catalog",
            )
        if not is_valid_chapter(full_book_name, chapter):
            return TierOutcome.failed(
                self.name, FailureKind.INVALID_NUMERIC_TOKEN,
                f"{full_book_name} has no chapter {chapter}",
            )
        if not (is_valid_verse(start_verse) and is_valid_verse(end_verse)):
            return TierOutcome.failed(
                self.name, FailureKind.INVALID_NUMERIC_TOKEN,
                f"verse {start_verse}-{end_verse} is out of range",
            )
        try:
            passage = Passage(
                book=book_id,
                full_book_name=full_book_name,
                chapter=chapter,
                start_verse=start_verse,
                end_verse=end_verse,
            )
        except ValueError as e:
            return TierOutcome.failed(self.name, FailureKind.INVALID_NUMERIC_TOKEN, str(e))
        return TierOutcome.success(self.name, [passage])

    def _passages(self, full_book_name: str, chapter: int,
                  verses: List[int]) -> TierOutcome:
        """One passage per contiguous run of verses in a single chapter."""
        passages: List[Passage] = []
        last_failure: Optional[TierOutcome] = None
        for start, end in verses_to_ranges(verses):
            outcome = self._passage(full_book_name, chapter, start, end)
            if outcome.matched:
                passages.extend(outcome.passages)
            else:
                last_failure = outcome
        if passages:
            return TierOutcome.success(self.name, passages)
        return last_failure or self._no_match()


class ContextChapterVerseStrategy(ResolverStrategy):
    """Context book with an explicit "chapter 5 verse 3"."""

    name = 'context_chapter_verse'

    def attempt(self, text, state):
        context = state.context
        if context.book is None:
            return self._no_match("no context book")
        found = detect_context_chapter_verse(text)
        if found is None:
            return self._no_match()
        if self.grammar.mentions_book(text):
            return self._no_match("text names its own book")
        chapter, verse = found
        return self._passage(context.book, chapter, verse, verse)


class VerseOnlyStrategy(ResolverStrategy):
    """Context book and chapter with "verse 17" or "verses 18 and 20"."""

    name = 'verse_only'

    def attempt(self, text, state):
        context = state.context
        if context.book is None or context.chapter is None:
            return self._no_match("no context chapter")
        verse = is_verse_only_reference(text)
        if verse is None:
            return self._no_match()
        if detect_context_chapter_verse(text) is not None:
            return self._no_match("text names its own chapter")
        if self.grammar.mentions_book(text):
            return self._no_match("text names its own book")
        verses = extract_verse_list(text) or [verse]
        return self._passages(context.book, context.chapter, verses)


class ChapterOnlyStrategy(ResolverStrategy):
    """Whole chapter by name ("Matthew chapter 5"), starting at verse 1."""

    name = 'chapter_only'

    def attempt(self, text, state):
        found = is_chapter_only_reference(text)
        if found is None:
            return self._no_match()
        book_text, chapter_text = found

        chapter = convert_to_number(chapter_text)
        if chapter is None or chapter < 1:
            return TierOutcome.failed(
                self.name, FailureKind.INVALID_NUMERIC_TOKEN,
                f"{chapter_text!r} is not a chapter number",
            )
        book = self.grammar.recognize_book(book_text)
        if book is None:
            return TierOutcome.failed(
                self.name, FailureKind.AMBIGUOUS_BOOK_NAME,
                f"{book_text!r} is not a book name",
            )
        return self._passage(book, chapter, 1, 1)


class CombinedDigitStrategy(ResolverStrategy):
    """Run-together chapter and verse ("Luke 611" → Luke 6:11)."""

    name = 'combined_digits'

    def attempt(self, text, state):
        passages: List[Passage] = []
        last_failure: Optional[TierOutcome] = None
        for match in find_combined_digit_references(text):
            outcome = self._passages(match.book, match.chapter, match.verses)
            if outcome.matched:
                passages.extend(outcome.passages)
            else:
                last_failure = outcome
        if passages:
            return TierOutcome.success(self.name, passages)
        return last_failure or self._no_match()


class GrammarStrategy(ResolverStrategy):
    """Full references through the grammar."""

    name = 'grammar'

    def attempt(self, text, state):
        try:
            result = self.grammar.parse(text)
        except Exception as e:
            return TierOutcome.failed(self.name, FailureKind.UPSTREAM_GRAMMAR_FAILURE, str(e))

        passages = passages_from_parse(result, self.catalog)
        if passages:
            return TierOutcome.success(self.name, passages)
        if result.entities:
            return TierOutcome.failed(
                self.name, FailureKind.INVALID_NUMERIC_TOKEN,
                "references found but none is a valid passage",
            )
        return self._no_match()


class GrammarContextStrategy(ResolverStrategy):
    """Retry the raw text as a fragment of the last resolved passage."""

    name = 'grammar_context'

    def _context_reference(self, text: str, state: SessionState) -> Optional[str]:
        return state.context.full_reference

    def attempt(self, text, state):
        context_reference = self._context_reference(text, state)
        if not context_reference:
            return self._no_match("no context reference")
        # "Acts 29:1" must not become a chapter of the context book
        if self._names_own_book(text):
            return self._no_match("text names its own book")
        try:
            candidate = self.grammar.parse_with_context(text, context_reference).osis()
        except Exception as e:
            return TierOutcome.failed(self.name, FailureKind.UPSTREAM_GRAMMAR_FAILURE, str(e))
        if not candidate:
            return self._no_match()
        return TierOutcome.rewrite(self.name, candidate)


class LegacyContextStrategy(GrammarContextStrategy):
    """Retry against the last successfully resolved raw input."""

    name = 'legacy_context'

    def _context_reference(self, text, state):
        if state.legacy_reference == text:
            return None
        return state.legacy_reference


class ExtractionStrategy(ResolverStrategy):
    """Splice "chapter N" / "verse N" numbers onto the last resolved input."""

    name = 'extraction'

    def attempt(self, text, state):
        if not state.legacy_reference:
            return self._no_match("no previous reference")
        if self._names_own_book(text):
            return self._no_match("text names its own book")
        extracted = extract_chapter_and_verse(text)
        if extracted.chapter is None and extracted.verse is None:
            return self._no_match()
        candidate = construct_reference_from_extracted(state.legacy_reference, extracted)
        if candidate is None:
            return self._no_match(f"cannot splice onto {state.legacy_reference!r}")
        return TierOutcome.rewrite(self.name, candidate)


DIRECT_STRATEGIES = [
    ContextChapterVerseStrategy,
    VerseOnlyStrategy,
    ChapterOnlyStrategy,
    CombinedDigitStrategy,
    GrammarStrategy,
]

FALLBACK_STRATEGIES = [
    GrammarContextStrategy,
    LegacyContextStrategy,
    ExtractionStrategy,
]


# ============================================================================
# RESOLVER
# ============================================================================

class ReferenceResolver:
    """
    Stateless resolver: state goes in with each call and comes back out.
    """

    def __init__(self, catalog: Optional[BookCatalog] = None,
                 grammar: Optional[ReferenceGrammar] = None,
                 verbose: bool = False):
        self.catalog = catalog or DEFAULT_CATALOG
        self.grammar = grammar or DEFAULT_GRAMMAR
        self.verbose = verbose
        self.direct_strategies = [cls(self.catalog, self.grammar) for cls in DIRECT_STRATEGIES]
        self.fallback_strategies = [cls(self.catalog, self.grammar) for cls in FALLBACK_STRATEGIES]

    def _log(self, message: str):
        # stdout belongs to the bridge's JSON stream
        if self.verbose:
            print(message, file=sys.stderr)

    def _attempt(self, strategy: ResolverStrategy, text: str,
                 state: SessionState) -> TierOutcome:
        try:
            outcome = strategy.attempt(text, state)
        except Exception as e:
            outcome = TierOutcome.failed(
                strategy.name, FailureKind.UPSTREAM_GRAMMAR_FAILURE,
                f"{type(e).__name__}: {e}",
            )
        if outcome.failure is not None and outcome.failure is not FailureKind.NO_MATCH:
            self._log(f"  ⚠ {strategy.name}: {outcome.failure.value} ({outcome.detail})")
        return outcome

    def _run_direct(self, text: str, state: SessionState,
                    outcomes: List[TierOutcome]) -> Optional[TierOutcome]:
        normalized = normalize_reference(text)
        if not normalized:
            return None
        for strategy in self.direct_strategies:
            outcome = self._attempt(strategy, normalized, state)
            outcomes.append(outcome)
            if outcome.matched:
                return outcome
        return None

    def resolve(self, text: str, state: Optional[SessionState] = None) -> ResolutionResult:
        """
        Resolve an utterance into passages.

        Args:
            text: Raw utterance, e.g. "John 3:16", "verse 17", "Luke. Three. Three."
            state: Session state from the previous call (fresh state if None)

        Returns:
            ResolutionResult with the passages (None if nothing resolved) and
            the state for the next call. On no match the input state is
            returned unchanged.
        """
        state = state or SessionState()
        outcomes: List[TierOutcome] = []
        if not isinstance(text, str) or not text.strip():
            return ResolutionResult(passages=None, state=state, outcomes=outcomes)

        # "next verse", "go back": the caller navigates, the context stays put
        command = is_navigation_command(text)
        if command is not None:
            outcomes.append(TierOutcome.failed('navigation', detail=f"navigation command {command!r}"))
            self._log(f"  ℹ Navigation command ({command}) in {text!r}")
            return ResolutionResult(passages=None, state=state, outcomes=outcomes)
        if is_likely_numbered_list(normalize_reference(text)):
            outcomes.append(TierOutcome.failed('numbered_list', detail="list item, not a verse"))
            return ResolutionResult(passages=None, state=state, outcomes=outcomes)

        winner = self._run_direct(text, state, outcomes)

        if winner is None:
            for strategy in self.fallback_strategies:
                outcome = self._attempt(strategy, text, state)
                outcomes.append(outcome)
                if outcome.candidate is None:
                    continue
                self._log(f"  ℹ {strategy.name}: retrying as {outcome.candidate!r}")
                rewritten = self._run_direct(outcome.candidate, state, outcomes)
                if rewritten is not None:
                    winner = TierOutcome(
                        tier=strategy.name,
                        passages=rewritten.passages,
                        candidate=outcome.candidate,
                    )
                    break

        if winner is None:
            self._log(f"  ℹ No reference found in {text!r}")
            return ResolutionResult(passages=None, state=state, outcomes=outcomes)

        passages = list(winner.passages)
        self._log(f"  ✓ {winner.tier}: {', '.join(p.reference for p in passages)}")
        return ResolutionResult(
            passages=passages,
            state=state.advance(passages[0], text),
            tier=winner.tier,
            outcomes=outcomes,
        )


class ResolverSession:
    """
    Owns the SessionState of one live session (one speaker, one screen).

    Not thread-safe; concurrent sessions each need their own instance.
    """

    def __init__(self, resolver: Optional[ReferenceResolver] = None,
                 state: Optional[SessionState] = None):
        self.resolver = resolver or ReferenceResolver()
        self.state = state or SessionState()
        self.last_result: Optional[ResolutionResult] = None

    @property
    def context(self) -> ConversationContext:
        return self.state.context

    @property
    def legacy_reference(self) -> Optional[str]:
        return self.state.legacy_reference

    def resolve(self, text: str) -> Optional[List[Passage]]:
        """Resolve an utterance and keep the resulting state."""
        result = self.resolver.resolve(text, self.state)
        self.state = result.state
        self.last_result = result
        return result.passages

    def reset(self):
        """Forget all conversational context."""
        self.state = SessionState()
        self.last_result = None


# ============================================================================
# CONVENIENCE API
# ============================================================================

_default_session: Optional[ResolverSession] = None


def get_default_session() -> ResolverSession:
    global _default_session
    if _default_session is None:
        _default_session = ResolverSession()
    return _default_session


def parse_verse_reference(reference: str) -> Optional[List[Passage]]:
    """
    Resolve a reference against the process-wide default session.

    Examples:
        parse_verse_reference("John 3:16") → [Passage(John 3:16)]
        parse_verse_reference("verse 17") → [Passage(John 3:17)]
    """
    return get_default_session().resolve(reference)


def reset_default_session():
    get_default_session().reset()
