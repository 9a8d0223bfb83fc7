"""
Scripture Reference Grammar

Parses full "Book Chapter:Verse[-Verse]" style references, including
multi-reference strings, into entities of passage spans, and resolves bare
fragments ("verse 17", "chapter 5", "5:3") against a known context reference.

Supported formats:
- Standard: "John 3:16", "John 3:16-18", "John 3:16-4:2"
- Period / space separated: "Romans 12.1", "Luke 3 3"
- Verbose: "John chapter 3 verse 16", "Ezekiel, chapter 5, verse 6"
- Whole chapter: "Matthew 5", "Matthew chapter 5"
- OSIS: "Matt.5.3", "John.3.16-John.3.18"
- Continuations: "John 3:16, 18", "John 3:16; 4:2"
- Translation tags: "John 3:16 KJV", "John 3:16 (NIV)"

Single-chapter books read "Jude 5" as Jude 1:5.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from book_catalog import (
    BOOK_PATTERN,
    SINGLE_CHAPTER_BOOKS,
    BookCatalog,
    DEFAULT_CATALOG,
    is_valid_chapter,
    is_valid_verse,
    normalize_book_name,
    osis_code,
)
from passage_model import DEFAULT_TRANSLATION, Passage

# ============================================================================
# CONFIGURATION
# ============================================================================

# Translation tags recognized after a reference
KNOWN_TRANSLATIONS = [
    'KJV', 'NKJV', 'NIV', 'ESV', 'NLT', 'NASB', 'RSV', 'NRSV', 'MSG', 'AMP',
    'YLT', 'WEB', 'NET', 'NLV', 'LSB', 'BSB', 'MEV', 'CSB', 'HCSB', 'CEB',
    'NABRE', 'GNT', 'ERV', 'ASV', 'ISV',
]


class GrammarError(ValueError):
    """Raised when a reference or context reference cannot be interpreted."""


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass
class VersePoint:
    """One end of a passage span: book, chapter and (optional) verse."""
    b: str  # Canonical book name
    c: int
    v: Optional[int] = None

    def osis(self) -> str:
        code = osis_code(self.b) or self.b
        if self.v is None:
            return f"{code}.{self.c}"
        return f"{code}.{self.c}.{self.v}"


@dataclass
class PassageSpan:
    """A contiguous passage as recognized by the grammar."""
    start: VersePoint
    end: Optional[VersePoint] = None
    valid: bool = True

    def osis(self) -> str:
        if self.end is None or (self.end.c == self.start.c and self.end.v == self.start.v):
            return self.start.osis()
        return f"{self.start.osis()}-{self.end.osis()}"


@dataclass
class ParsedEntity:
    """One reference found in the text, with any continuation spans."""
    passages: List[PassageSpan] = field(default_factory=list)
    translations: List[str] = field(default_factory=list)
    text: str = ""
    position: int = 0

    def osis(self) -> str:
        return ','.join(p.osis() for p in self.passages if p.valid)


@dataclass
class ParseResult:
    entities: List[ParsedEntity] = field(default_factory=list)

    def osis(self) -> str:
        """Canonical OSIS string of every valid span ("" when none)."""
        return ','.join(e.osis() for e in self.entities if e.osis())


# ============================================================================
# PATTERNS
# ============================================================================

_NUM = r'\d{1,3}(?!\d)'
_RANGE_SEP = r'\s*(?:-|–|—|\bto\b|\bthrough\b|\bthru\b)\s*'
_VERSE_WORD = r'(?:verses?|vv?|vs)\.?'
_CHAPTER_WORD = r'(?:chapter|chap|ch)\.?'

# "John chapter 3 verse 16", "Ezekiel, chapter 5, verse 6", "Matthew chapter 5"
_VERBOSE_PATTERN = (
    rf'(?P<book>{BOOK_PATTERN})\.?\s*,?\s*{_CHAPTER_WORD}\s*(?P<chapter>{_NUM})'
    rf'(?:(?:\s*,?\s*(?:and\s+)?(?:{_VERSE_WORD}\s*|[:.]\s*)|\s*,\s*)(?P<verse>{_NUM})'
    rf'(?:{_RANGE_SEP}(?P<end_verse>{_NUM}))?)?'
)

# "John 3:16", "Luke 3 3", "Matt.5.3", "John 3:16-4:2", "John 3 16-John 3 18"
_STANDARD_PATTERN = (
    rf'(?P<book>{BOOK_PATTERN})\.?\s*(?P<chapter>{_NUM})'
    rf'(?:\s*[:.]\s*|\s+(?:{_VERSE_WORD}\s*)?)(?P<verse>{_NUM})'
    rf'(?:{_RANGE_SEP}'
    rf'(?:(?:{BOOK_PATTERN})\.?\s*(?P<end_chapter>{_NUM})(?:\s*[:.]\s*|\s+)'
    rf'|(?P<end_chapter_short>{_NUM})\s*[:.]\s*)?'
    rf'(?P<end_verse>{_NUM}))?'
)

# "Matthew 5", "Genesis 1-3", "Jude 5"
_CHAPTER_PATTERN = (
    rf'(?P<book>{BOOK_PATTERN})\.?\s*(?P<chapter>{_NUM})(?!\s*[:.]\s*\d)'
    rf'(?:{_RANGE_SEP}(?P<end_chapter>{_NUM})(?!\s*[:.]\s*\d))?'
)

# ", 18" / "; 4:2" / "and 18-20" after a reference with a verse
_CONTINUATION_PATTERN = (
    rf'\s*(?:,|;|&|\band\b)\s*(?:(?P<chapter>{_NUM})\s*[:.]\s*)?(?P<verse>{_NUM})'
    rf'(?:{_RANGE_SEP}(?P<end_verse>{_NUM}))?'
)

_TRANSLATION_PATTERN = (
    r'\s*[\(\[]?\s*(?P<translation>' + '|'.join(KNOWN_TRANSLATIONS) + r')\b\s*[\)\]]?'
)

# Fragments resolved against a context reference
_FRAGMENT_CHAPTER_PATTERN = (
    rf'\b{_CHAPTER_WORD}\s*(?P<chapter>{_NUM})'
    rf'(?:\s*,?\s*(?:and\s+)?(?:{_VERSE_WORD}\s*|[:.]\s*)(?P<verse>{_NUM})'
    rf'(?:{_RANGE_SEP}(?P<end_verse>{_NUM}))?)?'
)
_FRAGMENT_VERSE_PATTERN = (
    rf'\b{_VERSE_WORD}\s*(?P<verse>{_NUM})(?:{_RANGE_SEP}(?P<end_verse>{_NUM}))?'
)
_FRAGMENT_CV_PATTERN = (
    rf'(?<![\w:])(?P<chapter>{_NUM})\s*:\s*(?P<verse>{_NUM})'
    rf'(?:{_RANGE_SEP}(?P<end_verse>{_NUM}))?'
)
_FRAGMENT_BARE_PATTERN = (
    rf'^\s*(?P<number>{_NUM})(?:{_RANGE_SEP}(?P<end_number>{_NUM}))?\s*[.!?]?\s*$'
)


def _int(value: Optional[str]) -> Optional[int]:
    return int(value) if value is not None else None


# ============================================================================
# GRAMMAR
# ============================================================================

class ReferenceGrammar:
    """Regex grammar for full scripture references over the book catalog."""

    def __init__(self):
        flags = re.IGNORECASE
        # Order matters: earlier patterns claim their text first
        self._patterns = [
            ('verbose', re.compile(_VERBOSE_PATTERN, flags)),
            ('standard', re.compile(_STANDARD_PATTERN, flags)),
            ('chapter', re.compile(_CHAPTER_PATTERN, flags)),
        ]
        self._continuation = re.compile(_CONTINUATION_PATTERN, flags)
        # Tags are only trusted in capitals ("net", "web" and "amp" are words)
        self._translation = re.compile(_TRANSLATION_PATTERN)
        self._book = re.compile(BOOK_PATTERN, flags)
        self._book_reference = re.compile(
            rf'(?:{BOOK_PATTERN})\.?\s*,?\s*(?:{_CHAPTER_WORD}\s*)?\d', flags
        )
        self._fragments = [
            re.compile(_FRAGMENT_CHAPTER_PATTERN, flags),
            re.compile(_FRAGMENT_VERSE_PATTERN, flags),
            re.compile(_FRAGMENT_CV_PATTERN, flags),
        ]
        self._bare_fragment = re.compile(_FRAGMENT_BARE_PATTERN, flags)

    # ------------------------------------------------------------------------
    # Book names
    # ------------------------------------------------------------------------

    def recognize_book(self, name: str) -> Optional[str]:
        """Canonical full book name for a spoken or written book name."""
        if not name:
            return None
        return normalize_book_name(name)

    def mentions_book(self, text: str) -> bool:
        """True when the text contains a book name followed by a chapter number."""
        for match in self._book_reference.finditer(text or ''):
            book_match = self._book.match(text, match.start())
            if book_match and normalize_book_name(book_match.group(0)):
                return True
        return False

    # ------------------------------------------------------------------------
    # Span construction
    # ------------------------------------------------------------------------

    @staticmethod
    def _make_span(book: str, chapter: int, verse: Optional[int],
                   end_chapter: Optional[int] = None,
                   end_verse: Optional[int] = None) -> PassageSpan:
        start = VersePoint(book, chapter, verse)
        end = None
        if end_chapter is not None or end_verse is not None:
            end = VersePoint(
                book,
                end_chapter if end_chapter is not None else chapter,
                end_verse,
            )

        valid = is_valid_chapter(book, chapter)
        if verse is not None and not is_valid_verse(verse):
            valid = False
        if end is not None:
            if end.c < chapter or not is_valid_chapter(book, end.c):
                valid = False
            if end.v is not None:
                if not is_valid_verse(end.v):
                    valid = False
                if end.c == chapter and verse is not None and end.v < verse:
                    valid = False
        return PassageSpan(start=start, end=end, valid=valid)

    def _span_from_match(self, kind: str, book: str, groups: dict) -> PassageSpan:
        chapter = int(groups['chapter'])
        verse = _int(groups.get('verse'))
        end_verse = _int(groups.get('end_verse'))

        if kind == 'chapter':
            end_chapter = _int(groups.get('end_chapter'))
            if book in SINGLE_CHAPTER_BOOKS and (chapter > 1 or end_chapter is not None):
                # "Jude 5" / "Jude 5-7" name verses of the only chapter
                return self._make_span(book, 1, chapter, None, end_chapter)
            return self._make_span(book, chapter, None, end_chapter, None)

        end_chapter = _int(groups.get('end_chapter')) or _int(groups.get('end_chapter_short'))
        return self._make_span(book, chapter, verse, end_chapter, end_verse)

    def _extend_entity(self, text: str, pos: int, entity: ParsedEntity) -> int:
        """Consume continuation spans and a translation tag; return the new end."""
        base = entity.passages[0]
        if base.start.v is not None:
            current_chapter = base.start.c
            while True:
                match = self._continuation.match(text, pos)
                if not match:
                    break
                number_start = match.start('chapter') if match.group('chapter') else match.start('verse')
                book_ahead = self._book.match(text, number_start)
                if book_ahead and normalize_book_name(book_ahead.group(0)):
                    # "and 2 Peter" starts a new reference
                    break
                if match.group('chapter'):
                    current_chapter = int(match.group('chapter'))
                entity.passages.append(self._make_span(
                    base.start.b,
                    current_chapter,
                    int(match.group('verse')),
                    None,
                    _int(match.group('end_verse')),
                ))
                pos = match.end()

        translation = self._translation.match(text, pos)
        if translation:
            entity.translations.append(translation.group('translation').upper())
            pos = translation.end()
        return pos

    # ------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------

    def parse(self, text: str) -> ParseResult:
        """
        Find every reference in the text.

        Args:
            text: Text containing zero or more references

        Returns:
            ParseResult whose entities are ordered by position in the text
        """
        if not text:
            return ParseResult()

        claimed: List[Tuple[int, int]] = []
        entities: List[ParsedEntity] = []

        for kind, pattern in self._patterns:
            for match in pattern.finditer(text):
                start, end = match.span()
                if any(start < c_end and c_start < end for c_start, c_end in claimed):
                    continue

                book = normalize_book_name(match.group('book'))
                if not book:
                    continue

                entity = ParsedEntity(
                    passages=[self._span_from_match(kind, book, match.groupdict())],
                    position=start,
                )
                end = self._extend_entity(text, end, entity)
                entity.text = text[start:end]
                entities.append(entity)
                claimed.append((start, end))

        entities.sort(key=lambda e: e.position)
        return ParseResult(entities=entities)

    def _context_anchor(self, context_reference: str) -> VersePoint:
        if not context_reference:
            raise GrammarError("No context reference")
        for entity in self.parse(context_reference).entities:
            for span in entity.passages:
                if span.valid:
                    return span.start
        raise GrammarError(f"Unusable context reference: {context_reference!r}")

    def _parse_fragment(self, text: str, anchor: VersePoint) -> List[PassageSpan]:
        for pattern in self._fragments:
            match = pattern.search(text)
            if not match:
                continue
            groups = match.groupdict()
            chapter = _int(groups.get('chapter'))
            verse = _int(groups.get('verse'))
            end_verse = _int(groups.get('end_verse'))
            return [self._make_span(
                anchor.b,
                chapter if chapter is not None else anchor.c,
                verse,
                None,
                end_verse,
            )]

        bare = self._bare_fragment.match(text)
        if bare:
            number = int(bare.group('number'))
            end_number = _int(bare.group('end_number'))
            if anchor.v is not None:
                # After a verse, a bare number is another verse
                return [self._make_span(anchor.b, anchor.c, number, None, end_number)]
            return [self._make_span(anchor.b, number, None, end_number, None)]

        return []

    def parse_with_context(self, text: str, context_reference: str) -> ParseResult:
        """
        Parse text that may only make sense relative to an earlier reference.

        A full reference in the text wins; otherwise a bare fragment is resolved
        against the context ("verse 17" after "John 3:16" → John.3.17).

        Raises:
            GrammarError: the context reference names no valid passage
        """
        direct = self.parse(text)
        if direct.osis():
            return direct

        anchor = self._context_anchor(context_reference)
        spans = self._parse_fragment(text or '', anchor)
        if not spans:
            return ParseResult()
        return ParseResult(entities=[ParsedEntity(passages=spans, text=text)])


DEFAULT_GRAMMAR = ReferenceGrammar()


# ============================================================================
# ADAPTER
# ============================================================================

def passages_from_parse(result: ParseResult,
                        catalog: BookCatalog = DEFAULT_CATALOG) -> List[Passage]:
    """
    Convert grammar entities to Passages.

    Invalid spans and books missing from the catalog are dropped. Whole-chapter
    spans start at verse 1; a span ending in another chapter keeps only its
    start verse.
    """
    passages: List[Passage] = []
    for entity in result.entities:
        translation = entity.translations[0] if entity.translations else DEFAULT_TRANSLATION
        for span in entity.passages:
            if not span.valid:
                continue
            book_id = catalog.canonical_id(span.start.b)
            if book_id is None:
                continue

            start_verse = span.start.v or 1
            end_verse = start_verse
            if span.end is not None and span.end.c == span.start.c and span.end.v:
                end_verse = max(span.end.v, start_verse)

            passages.append(Passage(
                book=book_id,
                full_book_name=span.start.b,
                chapter=span.start.c,
                start_verse=start_verse,
                end_verse=end_verse,
                translation=translation,
            ))
    return passages
