"""
Book Catalog - canonical Bible book names and app identifiers

Every other stage of the resolver talks about books through this module:
- BIBLE_BOOKS maps raw and alternate spellings to one canonical book name
- OSIS_BOOK_CODES gives the OSIS abbreviation used as the interchange format
- BOOK_CHAPTER_COUNTS drives chapter validation
- BookCatalog maps canonical names to the identifiers the presenting app uses
"""

import json
import re
from pathlib import Path
from typing import Dict, Optional, Union

# ============================================================================
# BIBLE BOOK DATA
# ============================================================================

# Complete list of Bible book names with variations
BIBLE_BOOKS = {
    # Old Testament
    'genesis': 'Genesis', 'gen': 'Genesis',
    'exodus': 'Exodus', 'exod': 'Exodus', 'ex': 'Exodus',
    'leviticus': 'Leviticus', 'lev': 'Leviticus',
    'numbers': 'Numbers', 'num': 'Numbers',
    'deuteronomy': 'Deuteronomy', 'deut': 'Deuteronomy',
    'joshua': 'Joshua', 'josh': 'Joshua',
    'judges': 'Judges', 'judg': 'Judges',
    'ruth': 'Ruth',
    '1 samuel': '1 Samuel', '1samuel': '1 Samuel', '1 sam': '1 Samuel', '1sam': '1 Samuel', 'first samuel': '1 Samuel',
    '2 samuel': '2 Samuel', '2samuel': '2 Samuel', '2 sam': '2 Samuel', '2sam': '2 Samuel', 'second samuel': '2 Samuel',
    '1 kings': '1 Kings', '1kings': '1 Kings', '1 kgs': '1 Kings', '1kgs': '1 Kings', 'first kings': '1 Kings',
    '2 kings': '2 Kings', '2kings': '2 Kings', '2 kgs': '2 Kings', '2kgs': '2 Kings', 'second kings': '2 Kings',
    '1 chronicles': '1 Chronicles', '1chronicles': '1 Chronicles', '1 chron': '1 Chronicles', '1chr': '1 Chronicles', 'first chronicles': '1 Chronicles',
    '2 chronicles': '2 Chronicles', '2chronicles': '2 Chronicles', '2 chron': '2 Chronicles', '2chr': '2 Chronicles', 'second chronicles': '2 Chronicles',
    'ezra': 'Ezra',
    'nehemiah': 'Nehemiah', 'neh': 'Nehemiah',
    'esther': 'Esther', 'est': 'Esther', 'esth': 'Esther',
    'job': 'Job',
    'psalms': 'Psalms', 'psalm': 'Psalms', 'ps': 'Psalms', 'psa': 'Psalms',
    'proverbs': 'Proverbs', 'prov': 'Proverbs', 'pro': 'Proverbs',
    'ecclesiastes': 'Ecclesiastes', 'eccl': 'Ecclesiastes', 'ecc': 'Ecclesiastes',
    'song of solomon': 'Song of Solomon', 'song of songs': 'Song of Solomon', 'song': 'Song of Solomon', 'sos': 'Song of Solomon',
    'isaiah': 'Isaiah', 'isa': 'Isaiah',
    'jeremiah': 'Jeremiah', 'jer': 'Jeremiah',
    'lamentations': 'Lamentations', 'lam': 'Lamentations',
    'ezekiel': 'Ezekiel', 'ezek': 'Ezekiel',
    'daniel': 'Daniel', 'dan': 'Daniel',
    'hosea': 'Hosea', 'hos': 'Hosea',
    'joel': 'Joel',
    'amos': 'Amos',
    'obadiah': 'Obadiah', 'obad': 'Obadiah',
    'jonah': 'Jonah',
    'micah': 'Micah', 'mic': 'Micah',
    'nahum': 'Nahum', 'nah': 'Nahum',
    'habakkuk': 'Habakkuk', 'hab': 'Habakkuk',
    'zephaniah': 'Zephaniah', 'zeph': 'Zephaniah',
    'haggai': 'Haggai', 'hag': 'Haggai',
    'zechariah': 'Zechariah', 'zech': 'Zechariah',
    'malachi': 'Malachi', 'mal': 'Malachi',
    # New Testament
    'matthew': 'Matthew', 'matt': 'Matthew', 'mat': 'Matthew', 'mt': 'Matthew',
    'mark': 'Mark', 'mk': 'Mark',
    'luke': 'Luke', 'lk': 'Luke',
    'john': 'John', 'jn': 'John', 'jhn': 'John',
    'acts': 'Acts',
    'romans': 'Romans', 'rom': 'Romans',
    '1 corinthians': '1 Corinthians', '1corinthians': '1 Corinthians', '1 cor': '1 Corinthians', '1cor': '1 Corinthians', 'first corinthians': '1 Corinthians',
    '2 corinthians': '2 Corinthians', '2corinthians': '2 Corinthians', '2 cor': '2 Corinthians', '2cor': '2 Corinthians', 'second corinthians': '2 Corinthians',
    'galatians': 'Galatians', 'gal': 'Galatians',
    'ephesians': 'Ephesians', 'eph': 'Ephesians',
    'philippians': 'Philippians', 'phil': 'Philippians', 'php': 'Philippians',
    'colossians': 'Colossians', 'col': 'Colossians',
    '1 thessalonians': '1 Thessalonians', '1thessalonians': '1 Thessalonians', '1 thess': '1 Thessalonians', '1thess': '1 Thessalonians', 'first thessalonians': '1 Thessalonians',
    '2 thessalonians': '2 Thessalonians', '2thessalonians': '2 Thessalonians', '2 thess': '2 Thessalonians', '2thess': '2 Thessalonians', 'second thessalonians': '2 Thessalonians',
    '1 timothy': '1 Timothy', '1timothy': '1 Timothy', '1 tim': '1 Timothy', '1tim': '1 Timothy', 'first timothy': '1 Timothy',
    '2 timothy': '2 Timothy', '2timothy': '2 Timothy', '2 tim': '2 Timothy', '2tim': '2 Timothy', 'second timothy': '2 Timothy',
    'titus': 'Titus', 'tit': 'Titus',
    'philemon': 'Philemon', 'phlm': 'Philemon', 'phm': 'Philemon',
    'hebrews': 'Hebrews', 'heb': 'Hebrews',
    'james': 'James', 'jas': 'James',
    '1 peter': '1 Peter', '1peter': '1 Peter', '1 pet': '1 Peter', '1pet': '1 Peter', 'first peter': '1 Peter',
    '2 peter': '2 Peter', '2peter': '2 Peter', '2 pet': '2 Peter', '2pet': '2 Peter', 'second peter': '2 Peter',
    '1 john': '1 John', '1john': '1 John', 'first john': '1 John',
    '2 john': '2 John', '2john': '2 John', 'second john': '2 John',
    '3 john': '3 John', '3john': '3 John', 'third john': '3 John',
    'jude': 'Jude',
    'revelation': 'Revelation', 'rev': 'Revelation', 'revelations': 'Revelation',
}

# OSIS book abbreviations (interchange format for context-resolved references)
OSIS_BOOK_CODES = {
    'Genesis': 'Gen', 'Exodus': 'Exod', 'Leviticus': 'Lev', 'Numbers': 'Num',
    'Deuteronomy': 'Deut', 'Joshua': 'Josh', 'Judges': 'Judg', 'Ruth': 'Ruth',
    '1 Samuel': '1Sam', '2 Samuel': '2Sam', '1 Kings': '1Kgs', '2 Kings': '2Kgs',
    '1 Chronicles': '1Chr', '2 Chronicles': '2Chr', 'Ezra': 'Ezra', 'Nehemiah': 'Neh',
    'Esther': 'Esth', 'Job': 'Job', 'Psalms': 'Ps', 'Proverbs': 'Prov',
    'Ecclesiastes': 'Eccl', 'Song of Solomon': 'Song', 'Isaiah': 'Isa', 'Jeremiah': 'Jer',
    'Lamentations': 'Lam', 'Ezekiel': 'Ezek', 'Daniel': 'Dan', 'Hosea': 'Hos',
    'Joel': 'Joel', 'Amos': 'Amos', 'Obadiah': 'Obad', 'Jonah': 'Jonah',
    'Micah': 'Mic', 'Nahum': 'Nah', 'Habakkuk': 'Hab', 'Zephaniah': 'Zeph',
    'Haggai': 'Hag', 'Zechariah': 'Zech', 'Malachi': 'Mal',
    'Matthew': 'Matt', 'Mark': 'Mark', 'Luke': 'Luke', 'John': 'John',
    'Acts': 'Acts', 'Romans': 'Rom', '1 Corinthians': '1Cor', '2 Corinthians': '2Cor',
    'Galatians': 'Gal', 'Ephesians': 'Eph', 'Philippians': 'Phil', 'Colossians': 'Col',
    '1 Thessalonians': '1Thess', '2 Thessalonians': '2Thess', '1 Timothy': '1Tim',
    '2 Timothy': '2Tim', 'Titus': 'Titus', 'Philemon': 'Phlm', 'Hebrews': 'Heb',
    'James': 'Jas', '1 Peter': '1Pet', '2 Peter': '2Pet', '1 John': '1John',
    '2 John': '2John', '3 John': '3John', 'Jude': 'Jude', 'Revelation': 'Rev',
}

# Chapter counts for the 66-book Protestant canon
BOOK_CHAPTER_COUNTS = {
    'Genesis': 50, 'Exodus': 40, 'Leviticus': 27, 'Numbers': 36, 'Deuteronomy': 34,
    'Joshua': 24, 'Judges': 21, 'Ruth': 4, '1 Samuel': 31, '2 Samuel': 24,
    '1 Kings': 22, '2 Kings': 25, '1 Chronicles': 29, '2 Chronicles': 36,
    'Ezra': 10, 'Nehemiah': 13, 'Esther': 10, 'Job': 42, 'Psalms': 150,
    'Proverbs': 31, 'Ecclesiastes': 12, 'Song of Solomon': 8, 'Isaiah': 66,
    'Jeremiah': 52, 'Lamentations': 5, 'Ezekiel': 48, 'Daniel': 12,
    'Hosea': 14, 'Joel': 3, 'Amos': 9, 'Obadiah': 1, 'Jonah': 4,
    'Micah': 7, 'Nahum': 3, 'Habakkuk': 3, 'Zephaniah': 3, 'Haggai': 2,
    'Zechariah': 14, 'Malachi': 4, 'Matthew': 28, 'Mark': 16, 'Luke': 24,
    'John': 21, 'Acts': 28, 'Romans': 16, '1 Corinthians': 16, '2 Corinthians': 13,
    'Galatians': 6, 'Ephesians': 6, 'Philippians': 4, 'Colossians': 4,
    '1 Thessalonians': 5, '2 Thessalonians': 3, '1 Timothy': 6, '2 Timothy': 4,
    'Titus': 3, 'Philemon': 1, 'Hebrews': 13, 'James': 5, '1 Peter': 5,
    '2 Peter': 3, '1 John': 5, '2 John': 1, '3 John': 1, 'Jude': 1,
    'Revelation': 22,
}

SINGLE_CHAPTER_BOOKS = frozenset(
    book for book, count in BOOK_CHAPTER_COUNTS.items() if count == 1
)

# Longest verse in the canon (Psalm 119:176)
MAX_VERSE_NUMBER = 176

# Every OSIS code is also accepted as a spelling
for _book, _code in OSIS_BOOK_CODES.items():
    BIBLE_BOOKS.setdefault(_code.lower(), _book)

# Ordinal words spoken in front of numbered books ("first John" → "1 john")
_ORDINAL_PREFIXES = {
    'first': '1', 'second': '2', 'third': '3',
    'i': '1', 'ii': '2', 'iii': '3',
}

# Book names sorted by length (longest first) to avoid partial matches.
# Spaces inside a name accept any run of whitespace ("1  John", "Song of  Solomon").
BOOK_NAMES_PATTERN = '|'.join(
    re.escape(name).replace(r'\ ', r'\s+')
    for name in sorted(BIBLE_BOOKS.keys(), key=len, reverse=True)
)

# Word-bounded book name, including a spoken or Roman ordinal prefix
BOOK_PATTERN = rf'\b(?:(?:first|second|third|iii|ii|i|1|2|3)\s+)?(?:{BOOK_NAMES_PATTERN})\b'


# ============================================================================
# LOOKUP FUNCTIONS
# ============================================================================

def normalize_book_name(name: str) -> Optional[str]:
    """
    Normalize a book name to its canonical form.

    Args:
        name: Book name (possibly abbreviated, OSIS, or with an ordinal word)

    Returns:
        Canonical book name or None if not recognized
    """
    if not name:
        return None

    normalized = re.sub(r'\s+', ' ', name.lower().strip().rstrip('.'))
    if normalized.startswith('the book of '):
        normalized = normalized[len('the book of '):]

    canonical = BIBLE_BOOKS.get(normalized)
    if canonical:
        return canonical

    parts = normalized.split(' ', 1)
    if len(parts) == 2 and parts[0] in _ORDINAL_PREFIXES:
        digit = _ORDINAL_PREFIXES[parts[0]]
        numbered = BIBLE_BOOKS.get(f"{digit} {parts[1]}") or BIBLE_BOOKS.get(f"{digit}{parts[1]}")
        if numbered:
            return numbered
        # "I Mark 5" reads as the pronoun, not a numbered book
        if parts[0] == 'i':
            return BIBLE_BOOKS.get(parts[1])

    return None


def is_valid_chapter(book: str, chapter: int) -> bool:
    """
    Check a chapter number against the book's chapter count.

    Unknown books are accepted (permissive fallback); non-positive chapters never are.
    """
    if chapter < 1:
        return False
    count = BOOK_CHAPTER_COUNTS.get(book)
    if count is None:
        return True
    return chapter <= count


def is_valid_verse(verse: int) -> bool:
    return 1 <= verse <= MAX_VERSE_NUMBER


def osis_code(book: str) -> Optional[str]:
    """Get the OSIS abbreviation for a canonical book name."""
    return OSIS_BOOK_CODES.get(book)


# ============================================================================
# BOOK CATALOG
# ============================================================================

class BookCatalog:
    """Maps book spellings to the identifier used by the presenting app.

    By default the identifier is the canonical book name. A mapping loaded from
    JSON (e.g. {"Psalms": "Psalm", "Song of Solomon": "Song of Songs"}) overrides
    individual books; its keys may be canonical names or any raw spelling.
    The catalog is read-only once built.
    """

    def __init__(self, mapping: Optional[Dict[str, str]] = None):
        self._mapping: Dict[str, str] = {}
        for raw, identifier in (mapping or {}).items():
            key = normalize_book_name(raw) or raw.strip().lower()
            self._mapping[key] = identifier

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'BookCatalog':
        """Load a catalog from a JSON object of spelling → identifier."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Book mapping must be a JSON object: {path}")
        return cls({str(k): str(v) for k, v in data.items()})

    def full_name(self, name: str) -> Optional[str]:
        """Canonical full book name for any accepted spelling."""
        return normalize_book_name(name)

    def canonical_id(self, name: str) -> Optional[str]:
        """
        Map a book spelling to the app-internal identifier.

        Returns:
            The identifier, or None when the spelling names no known book
            (the caller discards the match rather than guessing).
        """
        if not name:
            return None
        canonical = normalize_book_name(name)
        if canonical is None:
            return self._mapping.get(name.strip().lower())
        return self._mapping.get(canonical, canonical)

    def __contains__(self, name: str) -> bool:
        return self.canonical_id(name) is not None


DEFAULT_CATALOG = BookCatalog()
