#!/usr/bin/env python3
"""
Tests for the book catalog.

Covers:
- BOOK_CHAPTER_COUNTS completeness and correctness
- SINGLE_CHAPTER_BOOKS correctness
- normalize_book_name() spellings, ordinals and OSIS codes
- is_valid_chapter() edge cases
- BookCatalog identifier mapping and JSON loading
"""

import sys
import os
import json
import tempfile
import unittest

# Ensure src/python is on the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from book_catalog import (
    BIBLE_BOOKS,
    BOOK_CHAPTER_COUNTS,
    OSIS_BOOK_CODES,
    SINGLE_CHAPTER_BOOKS,
    BookCatalog,
    DEFAULT_CATALOG,
    is_valid_chapter,
    is_valid_verse,
    normalize_book_name,
    osis_code,
)


class TestBookData(unittest.TestCase):
    """Static book tables."""

    def test_sixty_six_books(self):
        self.assertEqual(len(BOOK_CHAPTER_COUNTS), 66)

    def test_every_canonical_name_has_chapter_count(self):
        for canonical in set(BIBLE_BOOKS.values()):
            self.assertIn(canonical, BOOK_CHAPTER_COUNTS, f"{canonical} missing a chapter count")

    def test_every_book_has_osis_code(self):
        self.assertEqual(set(OSIS_BOOK_CODES), set(BOOK_CHAPTER_COUNTS))

    def test_known_chapter_counts(self):
        self.assertEqual(BOOK_CHAPTER_COUNTS['Genesis'], 50)
        self.assertEqual(BOOK_CHAPTER_COUNTS['Psalms'], 150)
        self.assertEqual(BOOK_CHAPTER_COUNTS['Luke'], 24)
        self.assertEqual(BOOK_CHAPTER_COUNTS['Revelation'], 22)

    def test_single_chapter_books(self):
        self.assertEqual(
            SINGLE_CHAPTER_BOOKS,
            {'Obadiah', 'Philemon', '2 John', '3 John', 'Jude'},
        )
        for book in SINGLE_CHAPTER_BOOKS:
            self.assertEqual(BOOK_CHAPTER_COUNTS[book], 1)


class TestNormalizeBookName(unittest.TestCase):
    """Spoken and written spellings map to one canonical name."""

    def test_full_names_any_case(self):
        self.assertEqual(normalize_book_name('john'), 'John')
        self.assertEqual(normalize_book_name('GENESIS'), 'Genesis')

    def test_abbreviations(self):
        self.assertEqual(normalize_book_name('Gen'), 'Genesis')
        self.assertEqual(normalize_book_name('Ps'), 'Psalms')
        self.assertEqual(normalize_book_name('psalm'), 'Psalms')

    def test_spoken_ordinals(self):
        self.assertEqual(normalize_book_name('first John'), '1 John')
        self.assertEqual(normalize_book_name('Second Corinthians'), '2 Corinthians')
        self.assertEqual(normalize_book_name('III John'), '3 John')

    def test_osis_codes(self):
        self.assertEqual(normalize_book_name('Matt'), 'Matthew')
        self.assertEqual(normalize_book_name('1Cor'), '1 Corinthians')

    def test_the_book_of_prefix(self):
        self.assertEqual(normalize_book_name('the book of Ruth'), 'Ruth')

    def test_extra_whitespace(self):
        self.assertEqual(normalize_book_name('  song   of   solomon '), 'Song of Solomon')

    def test_unknown_name(self):
        self.assertIsNone(normalize_book_name('Hezekiah'))
        self.assertIsNone(normalize_book_name(''))

    def test_osis_code_lookup(self):
        self.assertEqual(osis_code('John'), 'John')
        self.assertEqual(osis_code('Matthew'), 'Matt')
        self.assertIsNone(osis_code('Nope'))


class TestValidation(unittest.TestCase):
    """Chapter and verse bounds."""

    def test_valid_chapter(self):
        self.assertTrue(is_valid_chapter('Luke', 6))
        self.assertTrue(is_valid_chapter('Luke', 24))

    def test_chapter_past_end(self):
        self.assertFalse(is_valid_chapter('Luke', 25))
        self.assertFalse(is_valid_chapter('Jude', 2))

    def test_non_positive_chapter(self):
        self.assertFalse(is_valid_chapter('John', 0))
        self.assertFalse(is_valid_chapter('John', -1))

    def test_unknown_book_is_permissive(self):
        self.assertTrue(is_valid_chapter('Unknown', 99))

    def test_verse_bounds(self):
        self.assertTrue(is_valid_verse(1))
        self.assertTrue(is_valid_verse(176))
        self.assertFalse(is_valid_verse(0))
        self.assertFalse(is_valid_verse(177))


class TestBookCatalog(unittest.TestCase):
    """App identifier mapping."""

    def test_default_identifier_is_canonical_name(self):
        self.assertEqual(DEFAULT_CATALOG.canonical_id('jn'), 'John')
        self.assertEqual(DEFAULT_CATALOG.canonical_id('first corinthians'), '1 Corinthians')

    def test_unknown_book_is_none(self):
        self.assertIsNone(DEFAULT_CATALOG.canonical_id('Hezekiah'))
        self.assertNotIn('Hezekiah', DEFAULT_CATALOG)
        self.assertIn('Romans', DEFAULT_CATALOG)

    def test_mapping_overrides_identifier(self):
        catalog = BookCatalog({'Psalms': 'Psalm', 'song of songs': 'Song of Songs'})
        self.assertEqual(catalog.canonical_id('ps'), 'Psalm')
        self.assertEqual(catalog.canonical_id('Song of Solomon'), 'Song of Songs')
        self.assertEqual(catalog.canonical_id('John'), 'John')

    def test_full_name(self):
        catalog = BookCatalog({'John': 'JHN'})
        self.assertEqual(catalog.full_name('john'), 'John')

    def test_from_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'books.json')
            with open(path, 'w', encoding='utf-8') as f:
                json.dump({'John': 'JHN'}, f)
            catalog = BookCatalog.from_file(path)
        self.assertEqual(catalog.canonical_id('John'), 'JHN')

    def test_from_file_rejects_non_object(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'books.json')
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(['John'], f)
            with self.assertRaises(ValueError):
                BookCatalog.from_file(path)


if __name__ == '__main__':
    unittest.main()
