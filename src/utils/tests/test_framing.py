"""Tests for request framing."""

import unittest

from utils.framing import decode_unit, encode_unit, frame_units, split_tokens
from utils.response_tokenizer import tokenize_line


class TestEncodeUnit(unittest.TestCase):

    def test_plain_text_unchanged(self):
        self.assertEqual(encode_unit('кошка'), 'кошка')

    def test_line_breaks_escaped(self):
        self.assertEqual(encode_unit('a\nb\r\nc'), 'a\\nb\\r\\nc')
        self.assertNotIn('\n', encode_unit('a\nb'))

    def test_backslash_escaped(self):
        self.assertEqual(encode_unit('a\\nb'), 'a\\\\nb')

    def test_round_trip(self):
        for unit in ('кошка', 'a\nb', 'a\\nb', '\\', '\r\n\\\\n', '', 'line\n'):
            with self.subTest(unit=unit):
                self.assertEqual(decode_unit(encode_unit(unit)), unit)

    def test_round_trip_through_line_parse(self):
        """An encoded unit survives being read back as a single line."""
        unit = 'первая\nвторая'
        (frame,) = frame_units([unit])
        raw = tokenize_line(frame)
        self.assertEqual(decode_unit(raw.raw), unit)

    def test_unknown_escape_kept(self):
        self.assertEqual(decode_unit('a\\tb'), 'a\\tb')


class TestFrameUnits(unittest.TestCase):

    def test_one_line_per_unit(self):
        frames = frame_units(['кошка', 'a\nb'])
        self.assertEqual(frames, ['кошка\n', 'a\\nb\n'])
        self.assertEqual(''.join(frames).count('\n'), 2)


class TestSplitTokens(unittest.TestCase):

    def test_drops_punctuation_and_digits(self):
        self.assertEqual(
            split_tokens('Связался с лучшим - подохни как все.'),
            ['Связался', 'с', 'лучшим', 'подохни', 'как', 'все'],
        )
        self.assertEqual(split_tokens('в 2024 году!'), ['в', 'году'])

    def test_keeps_hyphenated_words(self):
        self.assertEqual(split_tokens('кто-то пришёл'), ['кто-то', 'пришёл'])

    def test_empty(self):
        self.assertEqual(split_tokens('  ...  '), [])
