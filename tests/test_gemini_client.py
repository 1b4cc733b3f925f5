"""Tests for the Gemini client wrapper with the SDK mocked out."""
import unittest
from types import SimpleNamespace
from unittest import mock

import httpx

from finn.analysis.normalizer import parse_transactions
from finn.llm import LLMCategorizer, ParseError
from finn.llm.client import GeminiClient
from finn.utils.exceptions import LLMError, RetryableNetworkError


class TestGeminiClient(unittest.TestCase):
    """Test GeminiClient.generate."""

    def setUp(self):
        patcher = mock.patch("finn.llm.client.genai.Client")
        self.sdk_client = patcher.start().return_value
        self.addCleanup(patcher.stop)

    def test_returns_text_in_json_mode(self):
        self.sdk_client.models.generate_content.return_value = SimpleNamespace(text='{"a": 1}')
        client = GeminiClient("key", model_name="test-model")

        self.assertEqual(client.generate("prompt"), '{"a": 1}')

        kwargs = self.sdk_client.models.generate_content.call_args.kwargs
        self.assertEqual(kwargs["model"], "test-model")
        self.assertEqual(kwargs["contents"], "prompt")
        self.assertEqual(kwargs["config"].response_mime_type, "application/json")

    def test_plain_text_mode(self):
        self.sdk_client.models.generate_content.return_value = SimpleNamespace(text="hello")
        client = GeminiClient("key")

        client.generate("prompt", json_mode=False)

        self.assertIsNone(self.sdk_client.models.generate_content.call_args.kwargs["config"])

    def test_empty_response_raises(self):
        self.sdk_client.models.generate_content.return_value = SimpleNamespace(text="")
        client = GeminiClient("key")

        with self.assertRaises(LLMError):
            client.generate("prompt")
        self.assertEqual(self.sdk_client.models.generate_content.call_count, 1)

    def test_connection_failure_is_retried(self):
        self.sdk_client.models.generate_content.side_effect = httpx.ConnectError("network unreachable")
        client = GeminiClient("key", max_retries=2)

        with mock.patch("finn.utils.retry.time.sleep"):
            with self.assertRaises(RetryableNetworkError):
                client.generate("prompt")
        self.assertEqual(self.sdk_client.models.generate_content.call_count, 2)

    def test_categorize_falls_back_when_offline(self):
        """Test that a transport failure reaches the caller as ParseError."""
        self.sdk_client.models.generate_content.side_effect = httpx.ConnectError("network unreachable")
        categorizer = LLMCategorizer(GeminiClient("key", max_retries=1))

        result = categorizer.categorize(parse_transactions("2024-01-01,Rent,8000"), "p")

        self.assertIsInstance(result, ParseError)
        self.assertIn("network unreachable", result.reason)


if __name__ == "__main__":
    unittest.main()
