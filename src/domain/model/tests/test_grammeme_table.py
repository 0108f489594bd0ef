"""Tests for the grammeme table and catalog."""

import unittest

from domain.model.grammeme import Case, Category, Gender, Number, PartOfSpeech
from domain.model.grammeme_table import (
    DEFAULT_GRAMMEME_TABLE,
    GRAMMEME_CATALOG,
    Feature,
    GrammemeTable,
)


class TestGrammemeTableLookup(unittest.TestCase):
    """lookup() is total and returns typed features."""

    def test_russian_codes(self):
        self.assertEqual(DEFAULT_GRAMMEME_TABLE.lookup('жен'), Feature(Category.GENDER, Gender.FEMININE))
        self.assertEqual(DEFAULT_GRAMMEME_TABLE.lookup('им'), Feature(Category.CASE, Case.NOMINATIVE))
        self.assertEqual(DEFAULT_GRAMMEME_TABLE.lookup('ед'), Feature(Category.NUMBER, Number.SINGULAR))

    def test_english_codes(self):
        self.assertEqual(DEFAULT_GRAMMEME_TABLE.lookup('f'), Feature(Category.GENDER, Gender.FEMININE))
        self.assertEqual(DEFAULT_GRAMMEME_TABLE.lookup('abl'), Feature(Category.CASE, Case.PREPOSITIONAL))

    def test_part_of_speech_codes(self):
        self.assertEqual(DEFAULT_GRAMMEME_TABLE.lookup('S').value, PartOfSpeech.NOUN)
        self.assertEqual(DEFAULT_GRAMMEME_TABLE.lookup('SPRO').value, PartOfSpeech.NOUN_PRONOUN)

    def test_codes_are_case_sensitive(self):
        """'PART' is a particle, 'part' the partitive case."""
        self.assertEqual(DEFAULT_GRAMMEME_TABLE.lookup('PART').category, Category.PART_OF_SPEECH)
        self.assertEqual(DEFAULT_GRAMMEME_TABLE.lookup('part').category, Category.CASE)

    def test_unknown_codes_return_none(self):
        for code in ('', 'xyz', '?', 'ЖЕН', ' жен'):
            self.assertIsNone(DEFAULT_GRAMMEME_TABLE.lookup(code))

    def test_every_catalog_code_is_indexed(self):
        for category, codes in GRAMMEME_CATALOG.items():
            for code, value in codes.items():
                self.assertEqual(DEFAULT_GRAMMEME_TABLE.lookup(code), (category, value))

    def test_contains_and_len(self):
        self.assertIn('сов', DEFAULT_GRAMMEME_TABLE)
        self.assertNotIn('future', DEFAULT_GRAMMEME_TABLE)
        total = sum(len(codes) for codes in GRAMMEME_CATALOG.values())
        self.assertEqual(len(DEFAULT_GRAMMEME_TABLE), total)

    def test_codes_by_category(self):
        self.assertEqual(
            DEFAULT_GRAMMEME_TABLE.codes(Category.NUMBER),
            frozenset({'ед', 'мн', 'sg', 'pl'}),
        )


class TestGrammemeTableConstruction(unittest.TestCase):
    """Tables are built from catalogs and never mutated."""

    def test_conflicting_codes_rejected(self):
        with self.assertRaises(ValueError):
            GrammemeTable({
                Category.GENDER: {'x': Gender.MASCULINE},
                Category.CASE: {'x': Case.DATIVE},
            })

    def test_extend_returns_new_table(self):
        table = GrammemeTable({Category.GENDER: {'m': Gender.MASCULINE}})
        extended = table.extend({Category.CASE: {'d': Case.DATIVE}})

        self.assertIsNone(table.lookup('d'))
        self.assertEqual(extended.lookup('d'), Feature(Category.CASE, Case.DATIVE))
        self.assertEqual(extended.lookup('m'), Feature(Category.GENDER, Gender.MASCULINE))

    def test_extend_rejects_recategorized_code(self):
        with self.assertRaises(ValueError):
            DEFAULT_GRAMMEME_TABLE.extend({Category.CASE: {'жен': Case.DATIVE}})

    def test_source_catalog_changes_do_not_leak(self):
        catalog = {Category.GENDER: {'m': Gender.MASCULINE}}
        table = GrammemeTable(catalog)
        catalog[Category.GENDER]['f'] = Gender.FEMININE

        self.assertIsNone(table.lookup('f'))
