"""
Pattern detectors for elliptical and compact spoken references.

These recognize the forms the full grammar cannot resolve on its own:
- "chapter 5 verse 3" with no book (book comes from the conversation)
- "verse 17" / "v 17" / "vs 17" (book and chapter come from the conversation)
- "Matthew chapter 5" / "chapter 5 of Matthew" (defaults to verse 1)
- "Luke 611" combined digits (chapter 6, verse 11)

Detectors only recognize; the resolver turns their findings into Passages.
"""

import re
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Tuple

from book_catalog import BOOK_PATTERN, is_valid_chapter, normalize_book_name
from reference_grammar import DEFAULT_GRAMMAR
from verse_parser import parse_verses

# ============================================================================
# PATTERNS
# ============================================================================

# "chapter 5 verse 3", "chapter 5, verse 3" anywhere in the text
CONTEXT_CHAPTER_VERSE_RE = re.compile(r'\bchapter\s+(\d+)[,\s]+verse\s+(\d+)', re.IGNORECASE)

# "verse 10", "v 10", "vs. 10" anywhere ("If we jump to verse 10")
VERSE_ONLY_RE = re.compile(r'\b(?:verses?|vs?)\.?\s+(\d+)', re.IGNORECASE)

# "verses 18 and 19", "vv 3-5, 7", "verse 16 to 18"
VERSE_LIST_RE = re.compile(
    r'\b(?:verses?|vv?|vs)\.?\s+'
    r'(\d{1,3}(?:\s*(?:,\s*(?:and\s+)?|&|-|–|\band\b|\bto\b|\bthrough\b)\s*\d{1,3})*)(?!\d)',
    re.IGNORECASE,
)

# Spoken navigation ("next verse", "go back") is handled by the caller, not resolved
NAVIGATION_PATTERNS = [
    ('next_chapter', re.compile(r'\bnext\s+chapter\b|\bchapter\s+after\b')),
    ('previous_chapter', re.compile(r'\b(?:previous|prior)\s+chapter\b|\bgo\s+back\s+a\s+chapter\b')),
    ('next', re.compile(r'\bnext\s+(?:verse|scripture|one)\b|\bgo\s+(?:to\s+)?next\b|\bshow\s+next\b')),
    ('previous', re.compile(r'\b(?:previous|last)\s+(?:verse|scripture|one)\b|\bgo\s+back\b')),
]

_LIST_ITEM_RE = re.compile(r'\bnumber\s+\d{1,3}\b')
_BOOK_NAME_RE = re.compile(BOOK_PATTERN, re.IGNORECASE)
_CHAPTER_VERSE_WORD_RE = re.compile(r'\b(?:chapter|ch|verses?|vs?)\b|\d{1,3}:\d{1,3}')

CHAPTER_ONLY_PATTERNS = [
    # "Matthew chapter 5", "the book of Luke chapter three"
    ('book_first', re.compile(
        r'^(?:the\s+book\s+of\s+)?([A-Za-z0-9\s]+?)\s+chapter\s+(\d+|[a-z]+)$', re.IGNORECASE)),
    # "chapter 5 of Matthew"
    ('chapter_first', re.compile(
        r'^chapter\s+(\d+|[a-z]+)\s+of\s+(?:the\s+book\s+of\s+)?([A-Za-z0-9\s]+)$', re.IGNORECASE)),
]

# "Luke 611", "the book of Romans 1213"
COMBINED_DIGITS_RE = re.compile(
    rf'(?:\b(?:the\s+)?book\s+of\s+)?(?P<book>{BOOK_PATTERN})\s+(?P<combined>\d{{3,5}})(?!\d|\s*[:.]\s*\d)',
    re.IGNORECASE,
)

# Books whose chapter numbers legitimately exceed two digits
COMBINED_DIGITS_EXCLUDED_BOOKS = frozenset({'Psalms'})

_EXTRACT_CHAPTER_RE = re.compile(r'\b(?:chapter|ch\.?)\s*(\d+)', re.IGNORECASE)
_EXTRACT_VERSE_RE = re.compile(r'\b(?:verses?|v\.?)\s*(\d+)', re.IGNORECASE)
_CONTEXT_REFERENCE_RE = re.compile(r'^(.+?)\s+(\d+):(\d+)$')


def _positive_int(value: str) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


# ============================================================================
# CONTEXT DETECTORS
# ============================================================================

def mentions_book_reference(text: str) -> bool:
    """True when the text names its own book ("John chapter 3 verse 16")."""
    return DEFAULT_GRAMMAR.mentions_book(text)


def detect_context_chapter_verse(text: str) -> Optional[Tuple[int, int]]:
    """
    Find "chapter X verse Y" without regard to a book name.

    Returns:
        (chapter, verse), or None when absent or not positive numbers
    """
    match = CONTEXT_CHAPTER_VERSE_RE.search(text.strip())
    if not match:
        return None
    chapter = _positive_int(match.group(1))
    verse = _positive_int(match.group(2))
    if chapter is None or verse is None:
        return None
    return chapter, verse


def is_verse_only_reference(text: str) -> Optional[int]:
    """
    Check for a verse-only reference ("verse 7", "from verse 18", "in v 5").

    Returns:
        Verse number if found, None otherwise
    """
    match = VERSE_ONLY_RE.search(text.strip())
    if not match:
        return None
    return _positive_int(match.group(1))


def extract_verse_list(text: str) -> List[int]:
    """
    Verse numbers of the first spoken verse list ("verses 18 and 20" → [18, 20]).

    Returns:
        Sorted distinct verses, empty when the text has no verse list
    """
    match = VERSE_LIST_RE.search(text)
    if not match:
        return []
    return parse_verses(match.group(1))


def is_chapter_only_reference(text: str) -> Optional[Tuple[str, str]]:
    """
    Check for a chapter-only reference ("Matthew chapter 5", "chapter 3 of John").

    Returns:
        (book text, chapter text) as spoken, or None. The chapter may still be
        a word if number conversion left it alone.
    """
    normalized = text.strip()
    for form, pattern in CHAPTER_ONLY_PATTERNS:
        match = pattern.match(normalized)
        if not match:
            continue
        if form == 'chapter_first':
            chapter_str, book = match.group(1), match.group(2)
        else:
            book, chapter_str = match.group(1), match.group(2)
        return book.strip(), chapter_str.strip()
    return None


# ============================================================================
# GUARDS
# ============================================================================

def is_navigation_command(text: str) -> Optional[str]:
    """
    Recognize a spoken navigation command.

    Returns:
        'next', 'previous', 'next_chapter' or 'previous_chapter', or None
    """
    normalized = (text or '').lower().strip()
    for command, pattern in NAVIGATION_PATTERNS:
        if pattern.search(normalized):
            return command
    return None


def is_likely_numbered_list(text: str) -> bool:
    """
    True for list talk such as "point number 3" that must not become a verse.

    Expects digits (run the normalizer first). "Numbers 3", a book name,
    chapter/verse words or a "C:V" pair all rule the guard out.
    """
    normalized = (text or '').lower().strip()
    if not _LIST_ITEM_RE.search(normalized):
        return False
    if _BOOK_NAME_RE.search(normalized) or _CHAPTER_VERSE_WORD_RE.search(normalized):
        return False
    return True


# ============================================================================
# COMBINED DIGITS
# ============================================================================

@dataclass
class CombinedDigitMatch:
    """A "Book NNN" token split into chapter and verses."""
    book: str  # Canonical book name
    chapter: int
    verses: List[int] = field(default_factory=list)
    text: str = ""
    position: int = 0


def split_combined_digits(combined: str) -> Optional[Tuple[int, str]]:
    """
    Split a run-together number into (chapter, verse expression).

    "611" → (6, "11"), "1213" → (12, "13"), "12345" → (12, "345").
    The 5-digit split is a best-effort guess.
    """
    if not combined.isdigit():
        return None
    if len(combined) == 3:
        return int(combined[0]), combined[1:]
    if len(combined) in (4, 5):
        return int(combined[:2]), combined[2:]
    return None


def find_combined_digit_references(text: str) -> List[CombinedDigitMatch]:
    """
    Find "Book NNN" references and split them heuristically.

    Psalms is never split: its chapters run past 99. A match is dropped when
    the chapter does not exist in the book or no verse survives parsing.
    """
    matches: List[CombinedDigitMatch] = []
    for match in COMBINED_DIGITS_RE.finditer(text):
        book = normalize_book_name(match.group('book'))
        if not book or book in COMBINED_DIGITS_EXCLUDED_BOOKS:
            continue

        split = split_combined_digits(match.group('combined'))
        if split is None:
            continue
        chapter, verse_str = split
        verses = parse_verses(verse_str)
        if not is_valid_chapter(book, chapter) or not verses:
            continue

        matches.append(CombinedDigitMatch(
            book=book,
            chapter=chapter,
            verses=verses,
            text=match.group(0),
            position=match.start(),
        ))
    return matches


# ============================================================================
# REGEX EXTRACTION (last-resort fallback)
# ============================================================================

class ExtractedNumbers(NamedTuple):
    chapter: Optional[int]
    verse: Optional[int]


def extract_chapter_and_verse(text: str) -> ExtractedNumbers:
    """Pull standalone "chapter N" and "verse N" numbers out of free text."""
    chapter_match = _EXTRACT_CHAPTER_RE.search(text)
    verse_match = _EXTRACT_VERSE_RE.search(text)
    return ExtractedNumbers(
        chapter=_positive_int(chapter_match.group(1)) if chapter_match else None,
        verse=_positive_int(verse_match.group(1)) if verse_match else None,
    )


def construct_reference_from_extracted(context: Optional[str],
                                       extracted: ExtractedNumbers) -> Optional[str]:
    """
    Build "Book Chapter:Verse" from a previous reference and extracted numbers.

    Extracted values win; missing ones fall back to the context's values.

    Args:
        context: Previous reference, expected as "Book Chapter:Verse"
        extracted: Numbers found in the new text

    Returns:
        Constructed reference string, or None if the context is not usable
    """
    if not context or (extracted.chapter is None and extracted.verse is None):
        return None

    parts = _CONTEXT_REFERENCE_RE.match(context.strip())
    if not parts:
        return None

    book, context_chapter, context_verse = parts.groups()
    chapter = extracted.chapter if extracted.chapter is not None else int(context_chapter)
    verse = extracted.verse if extracted.verse is not None else int(context_verse)
    return f"{book} {chapter}:{verse}"
