"""
Reference text normalization for spoken and typed scripture references.

Speech-to-text output arrives as "Luke. Three. Three." or "John chapter three
verse sixteen"; everything downstream expects "Luke 3 3" and
"John chapter 3 verse 16". Number words are converted with text2digits one
cardinal phrase at a time, so two separate spoken numbers are never merged.
"""

import re
from typing import Optional

from text2digits import text2digits

# ============================================================================
# NUMBER WORDS
# ============================================================================

_UNITS = r'(?:one|two|three|four|five|six|seven|eight|nine)'
_TEENS = r'(?:ten|eleven|twelve|thirteen|fourteen|fifteen|sixteen|seventeen|eighteen|nineteen)'
_TENS = r'(?:twenty|thirty|forty|fifty|sixty|seventy|eighty|ninety)'
_SMALL = rf'(?:{_TENS}(?:[\s-]+{_UNITS})?|{_TEENS}|{_UNITS})'

# One spoken cardinal: "three", "twenty-three", "one hundred and nineteen"
CARDINAL_PHRASE_PATTERN = rf'\b(?:{_UNITS}\s+hundred(?:\s+(?:and\s+)?{_SMALL})?|{_SMALL})\b'
_CARDINAL_PHRASE_RE = re.compile(CARDINAL_PHRASE_PATTERN, re.IGNORECASE)

_t2d = text2digits.Text2Digits()


# ============================================================================
# SPEECH-TO-TEXT CORRECTIONS
# ============================================================================

# Misheard book names, corrected only when a number or "chapter" follows
# ("romance 8:28", "axe chapter 2"). Longer phrases are tried first.
TRANSCRIPTION_ERRORS = {
    'fast chronicles': 'Chronicles',
    'fast kings': 'Kings',
    'fast samuel': 'Samuel',
    'force corinthians': '1 Corinthians',
    'the tronomy': 'Deuteronomy',
    'axe': 'Acts',
    'romance': 'Romans',
    'viticus': 'Leviticus',
    'route': 'Ruth',
    'look': 'Luke',
}

_FOLLOWED_BY_NUMBER = r'(?=\s+(?:\d|chapter\b|ch\b))'

_TRANSCRIPTION_ERROR_RES = [
    (re.compile(rf'\b{re.escape(error)}\b{_FOLLOWED_BY_NUMBER}', re.IGNORECASE), correction)
    for error, correction in sorted(TRANSCRIPTION_ERRORS.items(), key=lambda item: -len(item[0]))
]

# "due chapter 2" is Joel
_HOMOPHONE_RE = re.compile(r'\bdue\s+(?=(?:chapter|ch)\b)', re.IGNORECASE)

_ORDINAL_INDICATOR_RE = re.compile(r'\b(\d{1,3})(?:st|nd|rd|th)\b', re.IGNORECASE)

# "II Corinthians", "I Peter"
_ROMAN_BOOK_PREFIX_RE = re.compile(
    r'\b(i{1,3})\s+(?=(?:samuel|kings|chronicles|corinthians|thessalonians|timothy|peter|john)\b)',
    re.IGNORECASE,
)

# "chapter iv", "verse xvi"; only well-formed numerals up to 399
_ROMAN_NUMERAL = r'(?=[ivxlc])c{0,3}(?:xc|xl|l?x{0,3})(?:ix|iv|v?i{0,3})'
_ROMAN_CHAPTER_VERSE_RE = re.compile(
    rf'\b(chapter|ch|verses?|vs|v)\s+({_ROMAN_NUMERAL})\b', re.IGNORECASE
)
_WORD_FOLLOWS_RE = re.compile(r'\s+[a-z]', re.IGNORECASE)

_ROMAN_VALUES = {'i': 1, 'v': 5, 'x': 10, 'l': 50, 'c': 100}


# ============================================================================
# PREPROCESSING
# ============================================================================

def preprocess_bible_reference(reference: str) -> str:
    """
    Normalize speech-to-text punctuation before parsing.

    Example: "Luke. Three. Three." → "Luke Three Three"
    """
    normalized = re.sub(r'\.\s*', ' ', reference)
    normalized = re.sub(r'\bchaper\b', 'chapter', normalized, flags=re.IGNORECASE)
    return re.sub(r'\s+', ' ', normalized).strip()


def _convert_phrase(phrase: str) -> str:
    converted = _t2d.convert(phrase.lower().replace('-', ' ')).strip()
    if re.fullmatch(r'\d+', converted):
        return converted
    return phrase


def convert_number_words(text: str) -> str:
    """
    Replace spelled-out cardinal numbers with digits.

    Only whole number phrases are touched; any other word is left alone.
    If conversion fails the text is returned unmodified.
    """
    try:
        return _CARDINAL_PHRASE_RE.sub(lambda m: _convert_phrase(m.group(0)), text)
    except Exception:
        return text


def normalize_transcription_errors(text: str) -> str:
    """
    Correct misheard book names ("romance 8:28" → "Romans 8:28").

    A correction applies only when a number or "chapter" follows, so
    "the romance of it" is left alone.
    """
    for pattern, correction in _TRANSCRIPTION_ERROR_RES:
        text = pattern.sub(correction, text)
    return _HOMOPHONE_RE.sub('Joel ', text)


def normalize_ordinal_indicators(text: str) -> str:
    """"3rd John" → "3 John", "2nd Timothy" → "2 Timothy"."""
    return _ORDINAL_INDICATOR_RE.sub(r'\1', text)


def roman_to_int(roman: str) -> Optional[int]:
    total = 0
    previous = 0
    for char in reversed(roman.lower()):
        value = _ROMAN_VALUES.get(char)
        if value is None:
            return None
        if value < previous:
            total -= value
        else:
            total += value
            previous = value
    return total or None


def normalize_roman_numerals(text: str) -> str:
    """
    Rewrite Roman numerals that mark a numbered book or a chapter/verse number.

    "II Corinthians 5:17" → "2 Corinthians 5:17"
    "John chapter iii verse xvi" → "John chapter 3 verse 16"
    """
    text = _ROMAN_BOOK_PREFIX_RE.sub(lambda m: f"{len(m.group(1))} ", text)

    def replace(match):
        roman = match.group(2)
        # "verse I love" keeps its pronoun
        if not roman or (roman.lower() == 'i' and _WORD_FOLLOWS_RE.match(text, match.end())):
            return match.group(0)
        value = roman_to_int(roman)
        if value is None:
            return match.group(0)
        return f"{match.group(1)} {value}"

    return _ROMAN_CHAPTER_VERSE_RE.sub(replace, text)


def normalize_reference(reference: str) -> str:
    """
    Full normalization before the detectors and the grammar run.

    Punctuation, number words, misheard book names, ordinal suffixes and
    Roman numerals, in that order.
    """
    if not reference:
        return ''
    text = convert_number_words(preprocess_bible_reference(reference))
    text = normalize_transcription_errors(text)
    text = normalize_ordinal_indicators(text)
    return normalize_roman_numerals(text)


def convert_to_number(token: str) -> Optional[int]:
    """
    Convert a word (or digits) to a number.

    Args:
        token: "16", "sixteen", "twenty-one"

    Returns:
        The integer, or None if the token is not a number
    """
    token = token.strip()
    if not token:
        return None
    if token.isdecimal():
        return int(token)
    if not _CARDINAL_PHRASE_RE.fullmatch(token):
        return None
    converted = convert_number_words(token)
    return int(converted) if converted.isdecimal() else None
