"""Unit tests for FakeDuplexStream, verifying EnginePort contract compliance."""

import unittest

from adapter.fake.stream import FakeDuplexStream


class TestFakeDuplexStream(unittest.TestCase):

    def test_preloaded_lines_then_eof(self):
        stream = FakeDuplexStream(['a', 'b\n'])
        self.assertEqual(stream.readline(), 'a\n')
        self.assertEqual(stream.readline(), 'b\n')
        self.assertEqual(stream.readline(), '')

    def test_records_writes(self):
        stream = FakeDuplexStream()
        stream.write('кошка\n')
        stream.write('собака\n')
        self.assertEqual(stream.requests, ['кошка', 'собака'])

    def test_responder_called_per_complete_line(self):
        calls = []

        def responder(request):
            calls.append(request)
            return [request.upper()]

        stream = FakeDuplexStream(responder=responder)
        stream.write('ab')
        self.assertEqual(calls, [])
        stream.write('c\nd\n')
        self.assertEqual(calls, ['abc', 'd'])
        self.assertEqual(stream.readline(), 'ABC\n')
        self.assertEqual(stream.readline(), 'D\n')

    def test_responder_mode_eof_on_close(self):
        stream = FakeDuplexStream(responder=lambda request: [], wait_timeout=5)
        stream.close()
        self.assertEqual(stream.readline(), '')
        self.assertFalse(stream.is_alive())

    def test_restart_loads_next_script_and_clears_errors(self):
        stream = FakeDuplexStream(read_error=OSError('boom'), restarts=[['x']])
        with self.assertRaises(OSError):
            stream.readline()
        stream.restart()
        self.assertEqual(stream.restart_count, 1)
        self.assertTrue(stream.is_alive())
        self.assertEqual(stream.readline(), 'x\n')

    def test_write_error(self):
        stream = FakeDuplexStream(write_error=BrokenPipeError())
        with self.assertRaises(BrokenPipeError):
            stream.write('a\n')

    def test_terminate(self):
        stream = FakeDuplexStream()
        stream.terminate()
        self.assertTrue(stream.terminated)
        self.assertFalse(stream.is_alive())
