"""Tests for structured JSON logging."""

import io
import json
import logging
import sys
import unittest

from domain.model.grammeme import Case
from utils.logging import JSONFormatter, setup_structured_logging


class TestJSONFormatter(unittest.TestCase):

    def _record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord('utils.test', logging.WARNING, __file__, 1, 'Skipping %s', ('entry',), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_standard_fields(self):
        data = json.loads(JSONFormatter().format(self._record()))
        self.assertEqual(data['level'], 'WARNING')
        self.assertEqual(data['logger'], 'utils.test')
        self.assertEqual(data['message'], 'Skipping entry')
        self.assertTrue(data['timestamp'].endswith('Z'))
        self.assertNotIn('msg', data)

    def test_extra_fields_and_cyrillic(self):
        output = JSONFormatter().format(self._record(raw_line='кошка{', offset=11, case=Case.DATIVE))
        self.assertIn('кошка{', output)
        data = json.loads(output)
        self.assertEqual(data['raw_line'], 'кошка{')
        self.assertEqual(data['offset'], 11)
        self.assertEqual(data['case'], 'dative')

    def test_exception_included(self):
        try:
            raise ValueError('boom')
        except ValueError:
            record = logging.LogRecord('x', logging.ERROR, __file__, 1, 'failed', (), sys.exc_info())
        data = json.loads(JSONFormatter().format(record))
        self.assertIn('ValueError: boom', data['exception'])


class TestSetupStructuredLogging(unittest.TestCase):

    def setUp(self):
        root = logging.getLogger()
        self._handlers, self._level = root.handlers[:], root.level

    def tearDown(self):
        root = logging.getLogger()
        root.handlers, root.level = self._handlers, self._level

    def test_installs_single_json_handler(self):
        stream = io.StringIO()
        setup_structured_logging(logging.DEBUG, stream=stream)
        logging.getLogger('services.test').debug("Driver state change", extra={"to_state": "sending"})

        data = json.loads(stream.getvalue().strip())
        self.assertEqual(data['to_state'], 'sending')
        self.assertEqual(len(logging.getLogger().handlers), 1)
