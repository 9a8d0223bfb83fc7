"""
Verse list parsing: "16", "16-18", "16, 17, and 18", "sixteen to eighteen".
"""

import re
from typing import List, Optional, Tuple

from book_catalog import MAX_VERSE_NUMBER
from reference_normalizer import convert_to_number

_RANGE_SEPARATOR_RE = re.compile(r'\s*(?:-|–|\bto\b|\bthrough\b)\s*')


def _parse_range(part: str) -> Optional[Tuple[int, int]]:
    # Hyphens also join number words ("twenty-one"), so try every separator
    for sep in _RANGE_SEPARATOR_RE.finditer(part):
        start = convert_to_number(part[:sep.start()])
        end = convert_to_number(part[sep.end():])
        if start is not None and end is not None and 0 < start <= end <= MAX_VERSE_NUMBER:
            return start, end
    return None


def parse_verses(verses_str: str) -> List[int]:
    """
    Parse verse numbers from a string.

    Handles ranges, commas, "and"/"&" separators and written numbers.
    Malformed parts are skipped.

    Args:
        verses_str: String containing verse numbers

    Returns:
        Sorted list of distinct positive verse numbers

    Examples:
        parse_verses("16") → [16]
        parse_verses("16-18") → [16, 17, 18]
        parse_verses("18,16,17") → [16, 17, 18]
        parse_verses("sixteen to eighteen") → [16, 17, 18]
    """
    if not verses_str:
        return []

    text = verses_str.lower()
    text = re.sub(r'\band\b', ',', text).replace('&', ',')

    verses = set()
    for part in re.split(r',+', text):
        part = part.strip()
        if not part:
            continue

        verse_range = _parse_range(part)
        if verse_range:
            verses.update(range(verse_range[0], verse_range[1] + 1))
            continue

        number = convert_to_number(part)
        if number is not None and 0 < number <= MAX_VERSE_NUMBER:
            verses.add(number)

    return sorted(verses)


def verses_to_ranges(verses: List[int]) -> List[Tuple[int, int]]:
    """Group verse numbers into contiguous (start, end) runs."""
    ranges: List[Tuple[int, int]] = []
    for verse in sorted(set(verses)):
        if ranges and verse == ranges[-1][1] + 1:
            ranges[-1] = (ranges[-1][0], verse)
        else:
            ranges.append((verse, verse))
    return ranges
