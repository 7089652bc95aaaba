import os
import sys
import unittest
from unittest.mock import patch, MagicMock, call

import httpx
import openai

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from commit_generator.ai import AIClient, build_prompt, is_split_suggestion, SYSTEM_PROMPT
from commit_generator.config import GeneratorConfig
from commit_generator.exceptions import (
    ConfigurationError, EmptyResponseError, RateLimitExceededError, RequestFailedError
)

REQUEST = httpx.Request('POST', 'http://localhost:11434/v1/chat/completions')


def rate_limit_error():
    return openai.RateLimitError(
        "Too Many Requests", response=httpx.Response(429, request=REQUEST), body=None)


def server_error():
    return openai.InternalServerError(
        "Internal Server Error", response=httpx.Response(500, request=REQUEST), body=None)


def completion(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


class TestPrompt(unittest.TestCase):
    """Test cases for prompt construction"""

    def test_prompt_without_rules(self):
        prompt = build_prompt("diff --git a/x b/x")
        self.assertNotIn("Team Rules:", prompt)
        self.assertTrue(prompt.endswith("Diff:\ndiff --git a/x b/x"))
        self.assertIn("Conventional Commits", prompt)

    def test_prompt_with_rules(self):
        prompt = build_prompt("the diff", "- Start with a verb")
        self.assertIn("Team Rules:\n- Start with a verb", prompt)
        self.assertLess(prompt.index("Team Rules:"), prompt.index("Diff:"))

    def test_split_suggestion(self):
        self.assertFalse(is_split_suggestion("feat(api): add endpoint"))
        self.assertTrue(is_split_suggestion("Split into:\n- feat(api)\n- docs"))


class TestAIClient(unittest.TestCase):
    """Test cases for the AI client"""

    def setUp(self):
        self.config = GeneratorConfig(api_key="sk-test-key-1234567890abcdef")
        patcher = patch('commit_generator.ai.openai.OpenAI')
        self.mock_openai = patcher.start()
        self.addCleanup(patcher.stop)
        self.create = self.mock_openai.return_value.chat.completions.create

    def test_missing_api_key(self):
        with self.assertRaises(ConfigurationError):
            AIClient(GeneratorConfig())

    def test_client_disables_sdk_retries(self):
        AIClient(self.config)
        kwargs = self.mock_openai.call_args.kwargs
        self.assertEqual(kwargs['max_retries'], 0)
        self.assertEqual(kwargs['base_url'], 'http://localhost:11434/v1')
        self.assertEqual(kwargs['timeout'], 60)

    def test_generate_commit_message(self):
        self.create.return_value = completion("  feat: add greeting\n")

        message = AIClient(self.config).generate_commit_message("diff", "rule one")

        self.assertEqual(message, "feat: add greeting")
        kwargs = self.create.call_args.kwargs
        self.assertEqual(kwargs['model'], 'gpt-oss:120b')
        self.assertEqual(kwargs['messages'][0], {"role": "system", "content": SYSTEM_PROMPT})
        self.assertIn("Team Rules:\nrule one", kwargs['messages'][1]['content'])

    @patch('commit_generator.ai.time.sleep')
    def test_retries_rate_limit_then_succeeds(self, mock_sleep):
        self.create.side_effect = [rate_limit_error(), rate_limit_error(), completion("fix: x")]

        message = AIClient(self.config).generate_commit_message("diff")

        self.assertEqual(message, "fix: x")
        self.assertEqual(self.create.call_count, 3)
        self.assertEqual(mock_sleep.call_args_list, [call(2.0), call(4.0)])

    @patch('commit_generator.ai.time.sleep')
    def test_rate_limit_exhausted(self, mock_sleep):
        self.create.side_effect = rate_limit_error()

        with self.assertRaises(RateLimitExceededError):
            AIClient(self.config).generate_commit_message("diff")

        self.assertEqual(self.create.call_count, 4)
        self.assertEqual(mock_sleep.call_args_list, [call(2.0), call(4.0), call(8.0)])

    @patch('commit_generator.ai.time.sleep')
    def test_other_status_errors_are_not_retried(self, mock_sleep):
        self.create.side_effect = server_error()

        with self.assertRaises(RequestFailedError) as ctx:
            AIClient(self.config).generate_commit_message("diff")

        self.assertIn("500", str(ctx.exception))
        self.assertEqual(self.create.call_count, 1)
        mock_sleep.assert_not_called()

    @patch('commit_generator.ai.time.sleep')
    def test_connection_error_is_not_retried(self, mock_sleep):
        self.create.side_effect = openai.APIConnectionError(request=REQUEST)

        with self.assertRaises(RequestFailedError):
            AIClient(self.config).generate_commit_message("diff")
        self.assertEqual(self.create.call_count, 1)
        mock_sleep.assert_not_called()

    @patch('commit_generator.ai.time.sleep')
    def test_invalid_response_is_wrapped(self, mock_sleep):
        self.create.side_effect = openai.APIResponseValidationError(
            response=httpx.Response(200, request=REQUEST), body=None)

        with self.assertRaises(RequestFailedError):
            AIClient(self.config).generate_commit_message("diff")
        self.assertEqual(self.create.call_count, 1)
        mock_sleep.assert_not_called()

    def test_empty_response(self):
        self.create.return_value = completion("   ")
        with self.assertRaises(EmptyResponseError):
            AIClient(self.config).generate_commit_message("diff")

    def test_no_choices(self):
        response = MagicMock()
        response.choices = []
        self.create.return_value = response
        with self.assertRaises(EmptyResponseError):
            AIClient(self.config).generate_commit_message("diff")

    def test_connection_check(self):
        self.create.return_value = completion("Test")
        self.assertTrue(AIClient(self.config).test_connection())

        self.create.side_effect = server_error()
        self.assertFalse(AIClient(self.config).test_connection())


if __name__ == '__main__':
    unittest.main()
