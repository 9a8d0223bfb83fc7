"""
Lightweight extraction of every reference in a piece of text.

Used where a transcript line or typed note may hold several references and
only book, chapter and verse numbers are needed ("Turn to John 3:16 and
Romans 8:28"). Recognizes:
- Colon form: "John 3:16", "Romans 8:28-30", "John 3:16, 17 and 18"
- Word form: "John chapter three verse sixteen", "Ezekiel, chapter 5, 6"
- Combined digits: "Luke 611" → Luke 6:11
"""

import re
from dataclasses import dataclass, field
from typing import List, Tuple

from book_catalog import (
    BOOK_PATTERN,
    BookCatalog,
    DEFAULT_CATALOG,
    is_valid_chapter,
    normalize_book_name,
)
from passage_model import Passage
from pattern_detectors import find_combined_digit_references
from reference_normalizer import CARDINAL_PHRASE_PATTERN, convert_to_number
from verse_parser import parse_verses, verses_to_ranges

# ============================================================================
# PATTERNS
# ============================================================================

_NUMBER = rf'(?:\d+|{CARDINAL_PHRASE_PATTERN})'
# A verse number that does not start the next reference ("16 and 2 Peter 1:3")
_VERSE_ITEM = rf'(?!{BOOK_PATTERN}){_NUMBER}'
_VERSE_SEP = r'\s*(?:-|–|,|&|\bto\b|\bthrough\b|\band\b)\s*'
_VERSE_LIST = rf'{_VERSE_ITEM}(?:{_VERSE_SEP}{_VERSE_ITEM})*'
_BOOK_PREFIX = r'(?:\b(?:the\s+)?book\s+of\s+)?'

COLON_RE = re.compile(
    rf'{_BOOK_PREFIX}(?P<book>{BOOK_PATTERN})\s+(?P<chapter>{_NUMBER})\s*:\s*(?P<verses>{_VERSE_LIST})',
    re.IGNORECASE,
)

WORD_RE = re.compile(
    rf'{_BOOK_PREFIX}(?P<book>{BOOK_PATTERN})\s*,?\s*(?:chapter|ch)\s+(?P<chapter>{_NUMBER})'
    rf'(?:\s*,?\s*(?:from\s+)?:?\s*(?:verses|verse|vs)\s+|\s*,\s*)'
    rf'(?P<verses>{_VERSE_LIST})',
    re.IGNORECASE,
)


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass
class ReferenceMatch:
    """One reference found in text: a book, a chapter and its verses."""
    book: str
    chapter: int
    verses: List[int] = field(default_factory=list)

    def text(self) -> str:
        return f"{self.book} {self.chapter}:{','.join(str(v) for v in self.verses)}"

    def to_passages(self, catalog: BookCatalog = DEFAULT_CATALOG) -> List[Passage]:
        """Contiguous Passages for the verse list; empty if the book or chapter is unknown."""
        book_id = catalog.canonical_id(self.book)
        if book_id is None or not is_valid_chapter(self.book, self.chapter):
            return []
        return [
            Passage(
                book=book_id,
                full_book_name=self.book,
                chapter=self.chapter,
                start_verse=start,
                end_verse=end,
            )
            for start, end in verses_to_ranges(self.verses)
        ]


@dataclass
class ParsedReferences:
    input: str
    references: List[ReferenceMatch] = field(default_factory=list)

    def text(self) -> str:
        """
        One "Book C:v1,v2" line per reference.

        When nothing was found, the input is returned with the word "is"
        removed ("Romans is 8 28" reads as "Romans 8 28" downstream).
        """
        if not self.references:
            without_is = re.sub(r'\bis\b', '', self.input)
            return re.sub(r'\s+', ' ', without_is).strip()
        return '\n'.join(ref.text() for ref in self.references)

    def passages(self, catalog: BookCatalog = DEFAULT_CATALOG) -> List[Passage]:
        result: List[Passage] = []
        for ref in self.references:
            result.extend(ref.to_passages(catalog))
        return result


# ============================================================================
# EXTRACTION
# ============================================================================

def _book_name(raw: str) -> str:
    return normalize_book_name(raw) or raw.strip()


def parse_bible_references(text: str) -> ParsedReferences:
    """
    Find every reference in the text.

    Args:
        text: Free text, e.g. "Turn to John 3:16 and Romans 8:28"

    Returns:
        ParsedReferences with references in the order they appear

    Example:
        parse_bible_references("Turn to John 3:16 and Romans 8:28").text()
        → "John 3:16\\nRomans 8:28"
    """
    if not text:
        return ParsedReferences(input=text or '')

    normalized = re.sub(r'\s+', ' ', re.sub(r'\.', ' ', text)).strip()

    found: List[Tuple[int, int, ReferenceMatch]] = []

    def overlaps(start: int, end: int) -> bool:
        return any(start < f_end and f_start < end for f_start, f_end, _ in found)

    for pattern in (COLON_RE, WORD_RE):
        for match in pattern.finditer(normalized):
            chapter = convert_to_number(match.group('chapter'))
            if chapter is None or overlaps(*match.span()):
                continue
            verses = parse_verses(match.group('verses'))
            found.append((match.start(), match.end(), ReferenceMatch(
                book=_book_name(match.group('book')),
                chapter=chapter,
                verses=verses,
            )))

    for combined in find_combined_digit_references(normalized):
        end = combined.position + len(combined.text)
        if overlaps(combined.position, end):
            continue
        found.append((combined.position, end, ReferenceMatch(
            book=combined.book,
            chapter=combined.chapter,
            verses=combined.verses,
        )))

    found.sort(key=lambda item: item[0])
    return ParsedReferences(input=text, references=[ref for _, _, ref in found])
