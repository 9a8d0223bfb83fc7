"""
Tests for resolver_bridge.py commands and the JSON-lines protocol.

Verifies that:
- check_dependencies() reports text2digits status
- resolve keeps one session across commands
- parse_references, get_context and reset_context respond as documented
- Bad input becomes {"type": "error"} lines, never an exception
"""

import sys
import os
import io
import json
import tempfile
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import resolver_bridge
from resolver_bridge import check_dependencies, handle_command, main, process_line


class BridgeTestCase(unittest.TestCase):

    def setUp(self):
        resolver_bridge._session = None

    def tearDown(self):
        resolver_bridge._session = None

    def run_lines(self, *commands):
        """Feed JSON-lines input through main() and return the parsed responses."""
        lines = [c if isinstance(c, str) else json.dumps(c) for c in commands]
        stdin = io.StringIO('\n'.join(lines) + '\n')
        with patch('sys.stdin', stdin), patch('sys.stdout', new_callable=io.StringIO) as stdout:
            main()
        return [json.loads(line) for line in stdout.getvalue().splitlines() if line.strip()]


class TestCheckDependencies(unittest.TestCase):

    def test_returns_dict_with_required_keys(self):
        result = check_dependencies()
        self.assertIn('dependencies', result)
        self.assertIn('all_installed', result)

    def test_checks_text2digits(self):
        result = check_dependencies()
        self.assertTrue(result['dependencies']['text2digits'])
        self.assertTrue(result['all_installed'])


class TestHandleCommand(BridgeTestCase):

    def test_resolve(self):
        result = handle_command({'command': 'resolve', 'text': 'John 3:16'})
        self.assertEqual(result['tier'], 'grammar')
        self.assertEqual(result['passages'][0]['book'], 'John')
        self.assertEqual(result['passages'][0]['startVerse'], 16)
        self.assertEqual(result['context']['fullReference'], 'John 3:16')

    def test_resolve_keeps_context(self):
        handle_command({'command': 'resolve', 'text': 'John 3:16'})
        result = handle_command({'command': 'resolve', 'text': 'verse 17'})
        self.assertEqual(result['passages'][0]['reference'], 'John 3:17')

    def test_resolve_no_match(self):
        result = handle_command({'command': 'resolve', 'text': 'the weather is nice today'})
        self.assertIsNone(result['passages'])
        self.assertIsNone(result['tier'])
        self.assertTrue(all(not o['matched'] for o in result['outcomes']))

    def test_resolve_requires_text(self):
        with self.assertRaises(ValueError):
            handle_command({'command': 'resolve'})

    def test_parse_references(self):
        result = handle_command({'command': 'parse_references', 'text': 'John 3:16 and Luke 611'})
        self.assertEqual(
            result['references'],
            [{'book': 'John', 'chapter': 3, 'verses': [16]},
             {'book': 'Luke', 'chapter': 6, 'verses': [11]}],
        )
        self.assertEqual(result['text'], 'John 3:16\nLuke 6:11')
        self.assertEqual([p['reference'] for p in result['passages']], ['John 3:16', 'Luke 6:11'])

    def test_get_and_reset_context(self):
        handle_command({'command': 'resolve', 'text': 'Romans 8:28'})
        state = handle_command({'command': 'get_context'})
        self.assertEqual(state['context']['book'], 'Romans')
        self.assertEqual(state['legacyReference'], 'Romans 8:28')

        state = handle_command({'command': 'reset_context'})
        self.assertIsNone(state['context']['book'])
        self.assertIsNone(state['legacyReference'])

    def test_unknown_command(self):
        with self.assertRaises(ValueError):
            handle_command({'command': 'transcribe'})

    def test_book_mapping_from_environment(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'books.json')
            with open(path, 'w', encoding='utf-8') as f:
                json.dump({'Psalms': 'Psalm'}, f)
            with patch.dict(os.environ, {'SCRIPTURE_BOOK_MAPPING': path}), \
                    patch('sys.stderr', new_callable=io.StringIO):
                result = handle_command({'command': 'resolve', 'text': 'Psalms 23:1'})
        self.assertEqual(result['passages'][0]['book'], 'Psalm')


class TestProtocol(BridgeTestCase):

    def test_one_response_per_line(self):
        responses = self.run_lines(
            {'command': 'resolve', 'text': 'John 3:16'},
            {'command': 'resolve', 'text': 'verse 17'},
        )
        self.assertEqual([r['type'] for r in responses], ['result', 'result'])
        self.assertEqual(responses[1]['passages'][0]['reference'], 'John 3:17')

    def test_blank_lines_ignored(self):
        responses = self.run_lines('', {'command': 'check_dependencies'}, '   ')
        self.assertEqual(len(responses), 1)

    def test_invalid_json(self):
        responses = self.run_lines('{not json', {'command': 'get_context'})
        self.assertEqual(responses[0]['type'], 'error')
        self.assertIn('Invalid JSON input', responses[0]['error'])
        self.assertEqual(responses[1]['type'], 'result')

    def test_command_error_reported(self):
        with patch('sys.stdout', new_callable=io.StringIO) as stdout:
            process_line(json.dumps({'command': 'bogus'}))
        response = json.loads(stdout.getvalue())
        self.assertEqual(response['type'], 'error')
        self.assertEqual(response['command'], 'bogus')
        self.assertIn('Unknown command', response['error'])

    def test_non_object_command(self):
        with patch('sys.stdout', new_callable=io.StringIO) as stdout:
            process_line('[1, 2]')
        self.assertEqual(json.loads(stdout.getvalue())['type'], 'error')


if __name__ == '__main__':
    unittest.main()
