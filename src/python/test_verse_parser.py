#!/usr/bin/env python3
"""
Tests for verse list parsing.
"""

import sys
import os
import unittest

# Ensure src/python is on the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from verse_parser import parse_verses, verses_to_ranges


class TestParseVerses(unittest.TestCase):

    def test_single(self):
        self.assertEqual(parse_verses('16'), [16])

    def test_range(self):
        self.assertEqual(parse_verses('16-18'), [16, 17, 18])

    def test_en_dash_range(self):
        self.assertEqual(parse_verses('4–6'), [4, 5, 6])

    def test_unordered_list_sorted(self):
        self.assertEqual(parse_verses('18,16,17'), [16, 17, 18])

    def test_comma_and_list(self):
        self.assertEqual(parse_verses('16, 17, and 18'), [16, 17, 18])

    def test_and_and_ampersand(self):
        self.assertEqual(parse_verses('1 and 3 & 5'), [1, 3, 5])

    def test_duplicates_removed(self):
        self.assertEqual(parse_verses('3, 3, 2-4'), [2, 3, 4])

    def test_word_range(self):
        self.assertEqual(parse_verses('sixteen to eighteen'), [16, 17, 18])

    def test_hyphenated_word_is_not_a_range(self):
        self.assertEqual(parse_verses('twenty-one'), [21])

    def test_reversed_range_skipped(self):
        self.assertEqual(parse_verses('18-16'), [])

    def test_junk_skipped(self):
        self.assertEqual(parse_verses('16, banana, 0'), [16])

    def test_empty(self):
        self.assertEqual(parse_verses(''), [])

    def test_range_past_longest_verse_skipped(self):
        self.assertEqual(parse_verses('1-500'), [])
        self.assertEqual(parse_verses('500'), [])


class TestVersesToRanges(unittest.TestCase):

    def test_contiguous(self):
        self.assertEqual(verses_to_ranges([16, 17, 18]), [(16, 18)])

    def test_gaps(self):
        self.assertEqual(verses_to_ranges([1, 2, 5, 7, 8]), [(1, 2), (5, 5), (7, 8)])

    def test_unsorted_input(self):
        self.assertEqual(verses_to_ranges([3, 1, 2]), [(1, 3)])

    def test_empty(self):
        self.assertEqual(verses_to_ranges([]), [])


if __name__ == '__main__':
    unittest.main()
