#!/usr/bin/env python3
"""
Tests for reference text normalization.

Covers:
- Speech-to-text punctuation ("Luke. Three. Three.")
- Number word conversion, one phrase at a time
- Failure tolerance of the number converter
- Misheard book names, ordinal suffixes and Roman numerals
- convert_to_number() tokens
"""

import sys
import os
import unittest
from unittest.mock import patch

# Ensure src/python is on the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import reference_normalizer
from reference_normalizer import (
    convert_number_words,
    convert_to_number,
    normalize_ordinal_indicators,
    normalize_reference,
    normalize_roman_numerals,
    normalize_transcription_errors,
    preprocess_bible_reference,
    roman_to_int,
)


class TestPreprocess(unittest.TestCase):
    """Period and whitespace cleanup."""

    def test_periods_become_spaces(self):
        self.assertEqual(preprocess_bible_reference('Luke. Three. Three.'), 'Luke Three Three')

    def test_osis_periods(self):
        self.assertEqual(preprocess_bible_reference('John.3.16'), 'John 3 16')

    def test_collapses_whitespace(self):
        self.assertEqual(preprocess_bible_reference('  John   3:16  '), 'John 3:16')

    def test_colons_kept(self):
        self.assertEqual(preprocess_bible_reference('Romans 8:28'), 'Romans 8:28')

    def test_chapter_typo(self):
        self.assertEqual(preprocess_bible_reference('Romans chaper 8'), 'Romans chapter 8')


class TestConvertNumberWords(unittest.TestCase):
    """Spelled-out cardinals become digits."""

    def test_single_words(self):
        self.assertEqual(
            convert_number_words('John chapter three verse sixteen'),
            'John chapter 3 verse 16',
        )

    def test_compound_number(self):
        self.assertEqual(convert_number_words('Psalm twenty three'), 'Psalm 23')

    def test_hyphenated_number(self):
        self.assertEqual(convert_number_words('verse twenty-one'), 'verse 21')

    def test_adjacent_numbers_not_merged(self):
        self.assertEqual(convert_number_words('Luke three three'), 'Luke 3 3')

    def test_digits_untouched(self):
        self.assertEqual(convert_number_words('John 3:16'), 'John 3:16')

    def test_other_words_untouched(self):
        self.assertEqual(convert_number_words('the weather is nice today'), 'the weather is nice today')

    def test_converter_failure_returns_input(self):
        with patch.object(reference_normalizer._t2d, 'convert', side_effect=RuntimeError('boom')):
            self.assertEqual(convert_number_words('Luke three'), 'Luke three')


class TestNormalizeReference(unittest.TestCase):

    def test_spoken_reference(self):
        self.assertEqual(normalize_reference('Luke. Three. Three.'), 'Luke 3 3')

    def test_empty(self):
        self.assertEqual(normalize_reference(''), '')

    def test_idempotent(self):
        once = normalize_reference('John chapter three verse sixteen')
        self.assertEqual(normalize_reference(once), once)


class TestSpeechCorrections(unittest.TestCase):
    """Misheard names, ordinals and Roman numerals."""

    def test_misheard_book_before_number(self):
        self.assertEqual(normalize_transcription_errors('romance 8:28'), 'Romans 8:28')
        self.assertEqual(normalize_transcription_errors('axe chapter 2'), 'Acts chapter 2')
        self.assertEqual(normalize_transcription_errors('1 fast chronicles 5'), '1 Chronicles 5')

    def test_misheard_word_elsewhere_untouched(self):
        self.assertEqual(normalize_transcription_errors('the romance of it'), 'the romance of it')
        self.assertEqual(normalize_transcription_errors('look at this'), 'look at this')

    def test_due_chapter_is_joel(self):
        self.assertEqual(normalize_transcription_errors('due chapter 2'), 'Joel chapter 2')
        self.assertEqual(normalize_transcription_errors('due 3 days'), 'due 3 days')

    def test_ordinal_suffixes(self):
        self.assertEqual(normalize_ordinal_indicators('3rd John 1:4'), '3 John 1:4')
        self.assertEqual(normalize_ordinal_indicators('2nd Timothy and 1st Peter'), '2 Timothy and 1 Peter')

    def test_roman_book_prefix(self):
        self.assertEqual(normalize_roman_numerals('II Corinthians 5:17'), '2 Corinthians 5:17')
        self.assertEqual(normalize_roman_numerals('I Peter 5:7'), '1 Peter 5:7')
        self.assertEqual(normalize_roman_numerals('iii John 4'), '3 John 4')

    def test_roman_book_prefix_needs_numbered_book(self):
        self.assertEqual(normalize_roman_numerals('I Mark this'), 'I Mark this')

    def test_roman_chapter_and_verse(self):
        self.assertEqual(normalize_roman_numerals('chapter iv verse xvi'), 'chapter 4 verse 16')

    def test_pronoun_after_verse_kept(self):
        self.assertEqual(normalize_roman_numerals('in this verse I see grace'), 'in this verse I see grace')

    def test_malformed_numeral_kept(self):
        self.assertEqual(normalize_roman_numerals('chapter civil'), 'chapter civil')

    def test_roman_to_int(self):
        self.assertEqual(roman_to_int('xiv'), 14)
        self.assertEqual(roman_to_int('cxix'), 119)
        self.assertIsNone(roman_to_int('abc'))

    def test_full_normalization(self):
        self.assertEqual(normalize_reference('Second Timothy. Three. Sixteen.'), 'Second Timothy 3 16')
        self.assertEqual(normalize_reference('romance chapter eight'), 'Romans chapter 8')


class TestConvertToNumber(unittest.TestCase):

    def test_digits(self):
        self.assertEqual(convert_to_number('16'), 16)
        self.assertEqual(convert_to_number(' 7 '), 7)

    def test_words(self):
        self.assertEqual(convert_to_number('sixteen'), 16)
        self.assertEqual(convert_to_number('twenty-one'), 21)

    def test_not_a_number(self):
        self.assertIsNone(convert_to_number('John'))
        self.assertIsNone(convert_to_number(''))
        self.assertIsNone(convert_to_number('three John'))


if __name__ == '__main__':
    unittest.main()
