"""Tests for analysis entry and word line decoding."""

import unittest

from domain.model.errors import MalformedAnalysisError, ProtocolFramingError
from domain.model.grammeme import Animacy, Case, Category, Gender, Number, PartOfSpeech
from domain.model.grammeme_table import DEFAULT_GRAMMEME_TABLE, GrammemeTable
from utils.analysis_decoder import (
    MalformedPolicy,
    decode_analyses,
    decode_entry,
    decode_word_line,
)
from utils.response_tokenizer import RawEntry, tokenize_line


class TestDecodeWordLine(unittest.TestCase):
    """End-to-end decoding of one text-format output line."""

    def test_cat_scenario(self):
        result = decode_word_line('кошка\t{кошка=S,жен,неод=им,ед}')

        self.assertEqual(result.text, 'кошка')
        self.assertEqual(len(result.analyses), 1)
        analysis = result.best
        self.assertEqual(analysis.lex, 'кошка')
        self.assertEqual(analysis.pos, PartOfSpeech.NOUN)
        self.assertEqual(analysis.grammemes.one(Category.GENDER), Gender.FEMININE)
        self.assertEqual(analysis.grammemes.one(Category.ANIMACY), Animacy.INANIMATE)
        self.assertEqual(analysis.grammemes.one(Category.CASE), Case.NOMINATIVE)
        self.assertEqual(analysis.grammemes.one(Category.NUMBER), Number.SINGULAR)
        self.assertIsNone(analysis.weight)

    def test_unrecognized_token_scenario(self):
        result = decode_word_line('xyzzy\t{xyzzy=?}')
        self.assertEqual(result.text, 'xyzzy')
        self.assertEqual(len(result.analyses), 1)
        self.assertEqual(result.best.lex, 'xyzzy')
        self.assertEqual(result.best.pos, PartOfSpeech.UNKNOWN)

    def test_empty_list_is_sentinel_not_error(self):
        result = decode_word_line('xyzzy\t{}')
        self.assertEqual(result.best.lex, 'xyzzy')
        self.assertTrue(result.best.is_unknown)

    def test_malformed_bracket_raises(self):
        with self.assertRaises(ProtocolFramingError):
            decode_word_line('кошка\t{кошка=S,жен')

    def test_order_preserved(self):
        result = decode_word_line('стали{сталь:0.7=S,жен,неод=род,ед|становиться:0.3=V,нп=прош,мн,изъяв}')
        self.assertEqual([a.lex for a in result.analyses], ['сталь', 'становиться'])
        self.assertEqual([a.weight for a in result.analyses], [0.7, 0.3])
        self.assertEqual([a.pos for a in result.analyses], [PartOfSpeech.NOUN, PartOfSpeech.VERB])

    def test_idempotent(self):
        line = 'мыши{мышь=S,жен,од=(род,ед|им,мн)|мыть=V=пов,ед}'
        self.assertEqual(decode_word_line(line), decode_word_line(line))

    def test_guessed_lemma(self):
        result = decode_word_line('гламурненько{гламурненько??}')
        self.assertEqual(result.best.lex, 'гламурненько')
        self.assertTrue(result.best.guessed)
        self.assertTrue(result.best.is_unknown)

    def test_guessed_lemma_with_grammemes(self):
        result = decode_word_line('куздра{куздра?=S,жен,неод=им,ед}')
        self.assertEqual(result.best.lex, 'куздра')
        self.assertTrue(result.best.guessed)
        self.assertEqual(result.best.pos, PartOfSpeech.NOUN)

    def test_escaped_lemma(self):
        result = decode_word_line('a\\=b{a\\=b=S}')
        self.assertEqual(result.text, 'a=b')
        self.assertEqual(result.best.lex, 'a=b')
        self.assertEqual(result.best.pos, PartOfSpeech.NOUN)

    def test_skip_policy_drops_malformed_sibling(self):
        with self.assertLogs('utils.analysis_decoder', level='WARNING'):
            result = decode_word_line('кошка{=S|кошка=S,жен}', policy=MalformedPolicy.SKIP)
        self.assertEqual(len(result.analyses), 1)
        self.assertEqual(result.best.lex, 'кошка')

    def test_fail_policy_fails_word(self):
        with self.assertRaises(MalformedAnalysisError) as ctx:
            decode_word_line('кошка{кошка=S,жен|кошка=}', policy=MalformedPolicy.FAIL)
        self.assertEqual(ctx.exception.entry, 'кошка=')
        self.assertEqual(ctx.exception.raw_line, 'кошка{кошка=S,жен|кошка=}')

    def test_all_entries_malformed_is_framing_error(self):
        with self.assertLogs('utils.analysis_decoder', level='WARNING'):
            with self.assertRaises(ProtocolFramingError) as ctx:
                decode_word_line('кошка{|=S}', policy=MalformedPolicy.SKIP)
        self.assertNotIsInstance(ctx.exception, MalformedAnalysisError)
        self.assertEqual(ctx.exception.offset, len('кошка{'.encode()))

    def test_injected_table(self):
        table = GrammemeTable({Category.PART_OF_SPEECH: {'N': PartOfSpeech.NOUN}})
        result = decode_word_line('кот{кот=N,муж}', table=table)
        self.assertEqual(result.best.pos, PartOfSpeech.NOUN)
        self.assertEqual(result.best.grammemes.unrecognized, ('муж',))


class TestDecodeEntry(unittest.TestCase):

    def test_weight_suffix(self):
        analysis = decode_entry(RawEntry('кошка:0.25=S', 0))
        self.assertEqual(analysis.lex, 'кошка')
        self.assertEqual(analysis.weight, 0.25)

    def test_non_numeric_suffix_stays_in_lemma(self):
        analysis = decode_entry(RawEntry('a:b=S', 0))
        self.assertEqual(analysis.lex, 'a:b')
        self.assertIsNone(analysis.weight)

    def test_malformed_entries(self):
        for text in ('', '   ', '=S', 'кошка', 'кошка=', 'кошка=  ', ':0.5=S'):
            with self.subTest(text=text):
                with self.assertRaises(MalformedAnalysisError) as ctx:
                    decode_entry(RawEntry(text, 7), raw_line='line')
                self.assertEqual(ctx.exception.offset, 7)
                self.assertEqual(ctx.exception.entry, text)


class TestDecodeAnalyses(unittest.TestCase):

    def test_entries_decoded_independently(self):
        raw = tokenize_line('x{a=S|b|c=V}')
        with self.assertLogs('utils.analysis_decoder', level='WARNING') as logs:
            analyses = decode_analyses(raw.entries, raw_line=raw.raw, policy=MalformedPolicy.SKIP)
        self.assertEqual([a.lex for a in analyses], ['a', 'c'])
        self.assertEqual(len(logs.records), 1)

    def test_default_table(self):
        raw = tokenize_line('x{a=S}')
        analyses = decode_analyses(raw.entries, table=DEFAULT_GRAMMEME_TABLE)
        self.assertEqual(analyses[0].pos, PartOfSpeech.NOUN)
