import unittest
from unittest.mock import MagicMock, patch

import httpx

from linkfolio.models.gemini import (
    GeminiClient,
    GeminiRequestException,
    GeminiTimeoutException,
)


class GeminiClientTests(unittest.TestCase):
    def test_missing_api_key(self):
        with self.assertRaises(GeminiRequestException):
            GeminiClient(api_key=None).generate("hello")

    @patch("linkfolio.models.gemini.genai.Client")
    def test_generate_returns_text(self, mock_client_cls):
        mock_client = mock_client_cls.return_value
        mock_client.models.generate_content.return_value = MagicMock(text="Hi there")

        client = GeminiClient(api_key="key", model="gemini-test", timeout_seconds=2)
        self.assertEqual(client.generate("hello", json_output=True), "Hi there")

        _, kwargs = mock_client_cls.call_args
        self.assertEqual(kwargs["http_options"].timeout, 2000)
        _, call_kwargs = mock_client.models.generate_content.call_args
        self.assertEqual(call_kwargs["model"], "gemini-test")
        self.assertEqual(call_kwargs["contents"], "hello")
        self.assertEqual(call_kwargs["config"].response_mime_type, "application/json")

    @patch("linkfolio.models.gemini.genai.Client")
    def test_empty_response_text(self, mock_client_cls):
        mock_client_cls.return_value.models.generate_content.return_value = MagicMock(
            text=None
        )
        self.assertEqual(GeminiClient(api_key="key").generate("hello"), "")

    @patch("linkfolio.models.gemini.genai.Client")
    def test_timeout(self, mock_client_cls):
        mock_client_cls.return_value.models.generate_content.side_effect = (
            httpx.ReadTimeout("slow")
        )
        with self.assertRaises(GeminiTimeoutException):
            GeminiClient(api_key="key").generate("hello")

    @patch("linkfolio.models.gemini.genai.Client")
    def test_transport_error(self, mock_client_cls):
        mock_client_cls.return_value.models.generate_content.side_effect = (
            httpx.ConnectError("refused")
        )
        with self.assertRaises(GeminiRequestException) as ctx:
            GeminiClient(api_key="key").generate("hello")
        self.assertNotIsInstance(ctx.exception, GeminiTimeoutException)

    @patch("linkfolio.models.gemini.genai.Client")
    def test_client_is_created_once(self, mock_client_cls):
        mock_client_cls.return_value.models.generate_content.return_value = MagicMock(
            text="ok"
        )
        client = GeminiClient(api_key="key")
        client.generate("one")
        client.generate("two")
        mock_client_cls.assert_called_once()


if __name__ == "__main__":
    unittest.main()
