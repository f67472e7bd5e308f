import json
import sys
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import httpx
from openai import APIConnectionError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.ai.factory import get_provider_adapter  # noqa: E402
from app.ai.providers.claude_provider import ClaudeProvider  # noqa: E402
from app.ai.providers.gemini_provider import GeminiProvider  # noqa: E402
from app.ai.providers.openai_provider import OpenAIProvider  # noqa: E402
from app.ai.types import ProviderConfig, ProviderHttpError  # noqa: E402


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def _timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


class ClaudeProviderTests(unittest.TestCase):
    config = ProviderConfig(provider="anthropic", api_key="sk-ant-test", model="claude-3-5-sonnet-20241022")

    def test_unwraps_first_content_block(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"content": [{"type": "text", "text": "{\"ok\": true}"}]})

        reply = ClaudeProvider(http_client=_client(handler)).analyze(self.config, "PROMPT")

        self.assertEqual(reply, "{\"ok\": true}")
        self.assertEqual(seen["url"], "https://api.anthropic.com/v1/messages")
        self.assertEqual(seen["headers"]["x-api-key"], "sk-ant-test")
        self.assertEqual(seen["headers"]["anthropic-version"], "2023-06-01")
        self.assertEqual(seen["body"]["model"], "claude-3-5-sonnet-20241022")
        self.assertEqual(seen["body"]["max_tokens"], 2000)
        self.assertEqual(seen["body"]["messages"], [{"role": "user", "content": "PROMPT"}])

    def test_error_envelope_message_is_extracted(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                401,
                json={"type": "error", "error": {"type": "authentication_error", "message": "invalid x-api-key"}},
            )

        with self.assertRaises(ProviderHttpError) as ctx:
            ClaudeProvider(http_client=_client(handler)).analyze(self.config, "PROMPT")
        self.assertEqual(ctx.exception.status, 401)
        self.assertEqual(ctx.exception.message, "invalid x-api-key")
        self.assertEqual(ctx.exception.code, "provider_error")

    def test_non_json_error_body_falls_back_to_unknown_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad gateway")

        with self.assertRaises(ProviderHttpError) as ctx:
            ClaudeProvider(http_client=_client(handler)).analyze(self.config, "PROMPT")
        self.assertEqual(ctx.exception.status, 502)
        self.assertEqual(ctx.exception.message, "Unknown error")

    def test_timeout_maps_to_timeout_status(self):
        with self.assertRaises(ProviderHttpError) as ctx:
            ClaudeProvider(timeout_s=1.5, http_client=_client(_timeout)).analyze(self.config, "PROMPT")
        self.assertEqual(ctx.exception.status, "timeout")

    def test_missing_content_is_unexpected_envelope(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"content": []})

        with self.assertRaises(ProviderHttpError) as ctx:
            ClaudeProvider(http_client=_client(handler)).analyze(self.config, "PROMPT")
        self.assertEqual(ctx.exception.status, 200)
        self.assertEqual(ctx.exception.message, "Unexpected response envelope")


class GeminiProviderTests(unittest.TestCase):
    config = ProviderConfig(provider="gemini", api_key="AIza-test", model="gemini-2.0-flash-lite")

    def test_unwraps_first_candidate_part(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"candidates": [{"content": {"parts": [{"text": "gemini reply"}], "role": "model"}}]},
            )

        reply = GeminiProvider(http_client=_client(handler)).analyze(self.config, "PROMPT")

        self.assertEqual(reply, "gemini reply")
        request = seen["request"]
        self.assertEqual(request.url.host, "generativelanguage.googleapis.com")
        self.assertEqual(request.url.path, "/v1beta/models/gemini-2.0-flash-lite:generateContent")
        self.assertEqual(request.headers["x-goog-api-key"], "AIza-test")
        self.assertNotIn("AIza-test", str(request.url))
        self.assertEqual(seen["body"]["contents"], [{"parts": [{"text": "PROMPT"}]}])
        self.assertEqual(seen["body"]["generationConfig"], {"temperature": 0.7, "maxOutputTokens": 2000})

    def test_error_envelope_message_is_extracted(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={"error": {"code": 400, "message": "API key not valid", "status": "INVALID_ARGUMENT"}},
            )

        with self.assertRaises(ProviderHttpError) as ctx:
            GeminiProvider(http_client=_client(handler)).analyze(self.config, "PROMPT")
        self.assertEqual(ctx.exception.status, 400)
        self.assertEqual(ctx.exception.message, "API key not valid")

    def test_blocked_prompt_without_candidates_is_unexpected_envelope(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})

        with self.assertRaises(ProviderHttpError) as ctx:
            GeminiProvider(http_client=_client(handler)).analyze(self.config, "PROMPT")
        self.assertEqual(ctx.exception.message, "Unexpected response envelope")

    def test_timeout_maps_to_timeout_status(self):
        with self.assertRaises(ProviderHttpError) as ctx:
            GeminiProvider(http_client=_client(_timeout)).analyze(self.config, "PROMPT")
        self.assertEqual(ctx.exception.status, "timeout")


class OpenAIProviderTests(unittest.TestCase):
    config = ProviderConfig(provider="openai", api_key="sk-openai-test", model="gpt-4o-mini")

    def test_unwraps_first_choice_message(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "id": "chatcmpl-1",
                    "object": "chat.completion",
                    "created": 0,
                    "model": "gpt-4o-mini",
                    "choices": [
                        {
                            "index": 0,
                            "finish_reason": "stop",
                            "message": {"role": "assistant", "content": "openai reply"},
                        }
                    ],
                },
            )

        reply = OpenAIProvider(http_client=_client(handler)).analyze(self.config, "PROMPT")

        self.assertEqual(reply, "openai reply")
        request = seen["request"]
        self.assertTrue(str(request.url).endswith("/chat/completions"))
        self.assertEqual(request.headers["authorization"], "Bearer sk-openai-test")
        self.assertEqual(seen["body"]["model"], "gpt-4o-mini")
        self.assertEqual(seen["body"]["messages"][0]["role"], "system")
        self.assertEqual(seen["body"]["messages"][1], {"role": "user", "content": "PROMPT"})

    def test_error_envelope_message_is_extracted_without_retry(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(
                429,
                json={"error": {"message": "Rate limit reached", "type": "rate_limit_error"}},
            )

        with self.assertRaises(ProviderHttpError) as ctx:
            OpenAIProvider(http_client=_client(handler)).analyze(self.config, "PROMPT")
        self.assertEqual(ctx.exception.status, 429)
        self.assertEqual(ctx.exception.message, "Rate limit reached")
        self.assertEqual(len(calls), 1)

    def test_timeout_maps_to_timeout_status(self):
        with self.assertRaises(ProviderHttpError) as ctx:
            OpenAIProvider(http_client=_client(_timeout)).analyze(self.config, "PROMPT")
        self.assertEqual(ctx.exception.status, "timeout")

    def test_owned_client_is_closed_after_each_call(self):
        reply = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="openai reply"))])
        with patch("app.ai.providers.openai_provider.OpenAI") as sdk:
            sdk.return_value.chat.completions.create.return_value = reply
            self.assertEqual(OpenAIProvider().analyze(self.config, "PROMPT"), "openai reply")
        sdk.return_value.close.assert_called_once_with()
        self.assertEqual(sdk.call_args.kwargs["max_retries"], 0)

    def test_owned_client_is_closed_when_the_call_fails(self):
        with patch("app.ai.providers.openai_provider.OpenAI") as sdk:
            sdk.return_value.chat.completions.create.side_effect = APIConnectionError(
                request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
            )
            with self.assertRaises(ProviderHttpError) as ctx:
                OpenAIProvider().analyze(self.config, "PROMPT")
        self.assertEqual(ctx.exception.status, "network")
        sdk.return_value.close.assert_called_once_with()

    def test_injected_http_client_is_left_open(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "id": "chatcmpl-2",
                    "object": "chat.completion",
                    "created": 0,
                    "model": "gpt-4o-mini",
                    "choices": [
                        {"index": 0, "finish_reason": "stop", "message": {"role": "assistant", "content": "ok"}}
                    ],
                },
            )

        http_client = _client(handler)
        OpenAIProvider(http_client=http_client).analyze(self.config, "PROMPT")
        self.assertFalse(http_client.is_closed)


class AdapterDispatchTests(unittest.TestCase):
    def test_each_provider_tag_maps_to_its_adapter(self):
        self.assertIsInstance(get_provider_adapter("openai"), OpenAIProvider)
        self.assertIsInstance(get_provider_adapter("anthropic"), ClaudeProvider)
        self.assertIsInstance(get_provider_adapter("gemini"), GeminiProvider)

    def test_unknown_provider_is_rejected(self):
        with self.assertRaises(ValueError):
            get_provider_adapter("mistral")  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
