"""ClaudeClient unit tests.

Tests the JSON extraction logic and the Messages API wrapper:
- Clean JSON, markdown-wrapped JSON, text with embedded JSON
- Error mapping (missing key, authentication, API failures, empty output)
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from app.services.claude_client import ClaudeClient, strip_code_fences
from app.exceptions import ClaudeClientError, ConfigurationError, GenerationError


ANTHROPIC_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _message(*texts):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=t) for t in texts])


def _api_client(response=None, side_effect=None):
    api = MagicMock()
    api.messages.create = AsyncMock(return_value=response, side_effect=side_effect)
    return api


@pytest.fixture
def client():
    """ClaudeClient instance (no network calls needed for _parse_json_response)."""
    return ClaudeClient(api_key="test-key")


class TestParseJsonResponseEmpty:
    def test_none_response_returns_empty_dict(self, client):
        assert client._parse_json_response(None) == {}

    def test_empty_string_returns_empty_dict(self, client):
        assert client._parse_json_response("") == {}

    def test_whitespace_only_returns_empty_dict(self, client):
        assert client._parse_json_response("   \n\t  ") == {}


class TestParseJsonResponseValid:
    def test_valid_json_object(self, client):
        result = client._parse_json_response('{"hasMultipleFeatures": true, "organizedContent": "x"}')
        assert result == {"hasMultipleFeatures": True, "organizedContent": "x"}

    def test_valid_json_array(self, client):
        result = client._parse_json_response('["Who is the audience?", "When does it ship?"]')
        assert result == ["Who is the audience?", "When does it ship?"]


class TestParseJsonResponseMarkdownWrapped:
    def test_json_in_markdown_code_block(self, client):
        response = '```json\n{"organizedContent": "## Feature: Login"}\n```'
        result = client._parse_json_response(response)
        assert result["organizedContent"] == "## Feature: Login"

    def test_json_in_plain_code_block(self, client):
        response = '```\n{"key": "value"}\n```'
        assert client._parse_json_response(response) == {"key": "value"}


class TestParseJsonResponseWithLeadingText:
    def test_leading_text_before_json(self, client):
        response = 'Here is the result:\n{"hasMultipleFeatures": false}'
        assert client._parse_json_response(response) == {"hasMultipleFeatures": False}

    def test_leading_text_before_json_array(self, client):
        response = 'Questions:\n["First?", "Second?"] Hope this helps.'
        assert client._parse_json_response(response) == ["First?", "Second?"]

    def test_brackets_inside_strings_are_ignored(self, client):
        response = 'Result: {"organizedContent": "use {braces} and ]"} trailing'
        result = client._parse_json_response(response)
        assert result["organizedContent"] == "use {braces} and ]"


class TestParseJsonResponseInvalid:
    def test_no_brackets_raises_error(self, client):
        with pytest.raises(ClaudeClientError):
            client._parse_json_response("This is just plain text with no JSON at all")

    def test_broken_json_after_bracket_raises_error(self, client):
        with pytest.raises(ClaudeClientError):
            client._parse_json_response("result: {broken json without closing")


class TestStripCodeFences:
    def test_html_fence_removed(self):
        assert strip_code_fences("```html\n<h3>Title</h3>\n```") == "<h3>Title</h3>"

    def test_unfenced_text_is_trimmed_only(self):
        assert strip_code_fences("  <p>Body</p>\n") == "<p>Body</p>"


class TestComplete:
    async def test_missing_api_key_raises_before_any_call(self):
        client = ClaudeClient(api_key="")
        with pytest.raises(ConfigurationError):
            await client.complete("system", "user")

    async def test_joins_text_blocks(self):
        api = _api_client(response=_message("<h3>Release", " Notes</h3>"))
        client = ClaudeClient(api_key="test-key", client=api)

        result = await client.complete("system", "user", max_tokens=2500, temperature=0.7)

        assert result == "<h3>Release Notes</h3>"
        kwargs = api.messages.create.call_args.kwargs
        assert kwargs["system"] == "system"
        assert kwargs["messages"] == [{"role": "user", "content": "user"}]
        assert kwargs["max_tokens"] == 2500
        assert kwargs["temperature"] == 0.7

    async def test_empty_response_raises_generation_error(self):
        client = ClaudeClient(api_key="test-key", client=_api_client(response=_message("   ")))
        with pytest.raises(GenerationError):
            await client.complete("system", "user")

    async def test_authentication_failure_is_configuration_error(self):
        error = anthropic.AuthenticationError(
            "invalid x-api-key",
            response=httpx.Response(401, request=ANTHROPIC_REQUEST),
            body=None,
        )
        client = ClaudeClient(api_key="bad-key", client=_api_client(side_effect=error))
        with pytest.raises(ConfigurationError):
            await client.complete("system", "user")

    async def test_server_error_is_claude_client_error(self):
        error = anthropic.InternalServerError(
            "overloaded",
            response=httpx.Response(529, request=ANTHROPIC_REQUEST),
            body=None,
        )
        api = _api_client(side_effect=error)
        client = ClaudeClient(api_key="test-key", client=api)

        with pytest.raises(ClaudeClientError) as exc_info:
            await client.complete("system", "user")

        assert exc_info.value.details == {"status_code": 529}
        # 재시도 없음
        assert api.messages.create.await_count == 1

    async def test_connection_error_is_claude_client_error(self):
        error = anthropic.APIConnectionError(request=ANTHROPIC_REQUEST)
        client = ClaudeClient(api_key="test-key", client=_api_client(side_effect=error))
        with pytest.raises(ClaudeClientError):
            await client.complete("system", "user")

    async def test_complete_json_parses_response(self):
        api = _api_client(response=_message('```json\n["Who reads this?"]\n```'))
        client = ClaudeClient(api_key="test-key", client=api)

        result = await client.complete_json("system", "user")

        assert result == ["Who reads this?"]
        prompt = api.messages.create.call_args.kwargs["messages"][0]["content"]
        assert "valid JSON only" in prompt
