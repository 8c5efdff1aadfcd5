"""Unit tests for the ScraperLLM client."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

ENV_KEYS_TO_REMOVE = [
    "COMPLETION_LLM_PROVIDER",
    "COMPLETION_LLM_MODEL",
    "COMPLETION_LLM_API_KEY",
    "COMPLETION_LLM_BASE_URL",
    "COMPLETION_LLM_MAX_RETRIES",
    "COMPLETION_LLM_REASONING_EFFORT",
    "COMPLETION_DEFAULT_TEMPERATURE",
    "COMPLETION_DEFAULT_MAX_TOKENS",
]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Remove completion env vars for isolated testing."""
    for key in ENV_KEYS_TO_REMOVE:
        monkeypatch.delenv(key, raising=False)


class _DummyFunction:
    def __init__(self, arguments: str):
        self.arguments = arguments


class _DummyToolCall:
    def __init__(self, arguments: str):
        self.function = _DummyFunction(arguments)


class _DummyMessage:
    def __init__(self, content: object, tool_calls: list[object] | None = None):
        self.content = content
        self.tool_calls = tool_calls


class _DummyChoice:
    def __init__(self, message: _DummyMessage):
        self.message = message


class _DummyResponse:
    def __init__(self, message: _DummyMessage):
        self.choices = [_DummyChoice(message)]


def _response(content: object, tool_calls: list[object] | None = None):
    return _DummyResponse(_DummyMessage(content, tool_calls=tool_calls))


def _llm(**overrides):
    from llm_scraper.completion.config import CompletionConfig
    from llm_scraper.completion.llm import ScraperLLM

    return ScraperLLM(config=CompletionConfig(_env_file=None, **overrides))


def _page(content_format: str = "html", content: str = "<p>stories</p>"):
    from llm_scraper.preprocess.models import ScraperLoadResult

    return ScraperLoadResult(
        url="https://news.example.com", content=content, format=content_format
    )


class TestScraperLLMModelName:
    """Tests for provider-qualified model names."""

    def test_openai_models_have_no_prefix(self):
        assert _llm(llm_provider="openai", llm_model="gpt-4o")._get_model_name() == "gpt-4o"

    def test_anthropic_models_are_prefixed(self):
        llm = _llm(llm_provider="anthropic", llm_model="claude-3-opus")
        assert llm._get_model_name() == "anthropic/claude-3-opus"

    def test_base_url_routes_as_openai_compatible(self):
        llm = _llm(llm_model="llama3", llm_base_url="http://localhost:11434/v1")
        assert llm._get_model_name() == "openai/llama3"

    def test_other_providers_are_prefixed(self):
        llm = _llm(llm_provider="groq", llm_model="llama-3.1-8b-instant")
        assert llm._get_model_name() == "groq/llama-3.1-8b-instant"


class TestScraperLLMGenerateCompletions:
    """Tests for generate_completions."""

    @pytest.mark.asyncio
    async def test_returns_validated_data_and_url(
        self, top_stories_json, top_stories_schema
    ):
        """A well-formed JSON response should become a completion result."""
        from llm_scraper.completion.models import ScraperCompletionResult

        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(top_stories_json)

            result = await _llm().generate_completions(_page(), top_stories_schema)

        assert isinstance(result, ScraperCompletionResult)
        assert isinstance(result.data, top_stories_schema)
        assert result.url == "https://news.example.com"
        assert result.data.top[0].title == "Show HN: A thing"
        assert result.to_dict()["data"]["top"][1]["by"] == "bob"

    @pytest.mark.asyncio
    async def test_sends_messages_and_default_sampling(
        self, top_stories_json, top_stories_schema
    ):
        """Defaults from the config should be used for unset sampling options."""
        from llm_scraper.completion.prompts import DEFAULT_SYSTEM_PROMPT

        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(top_stories_json)

            await _llm().generate_completions(_page(), top_stories_schema)

        kwargs = mock_completion.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 2048
        assert "top_p" not in kwargs
        assert kwargs["messages"][0] == {
            "role": "system",
            "content": DEFAULT_SYSTEM_PROMPT,
        }
        assert "URL: https://news.example.com" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_request_options_override_defaults(
        self, top_stories_json, top_stories_schema
    ):
        """Explicit options, including a zero temperature, should be honoured."""
        from llm_scraper.completion.models import ScraperLLMOptions

        options = ScraperLLMOptions(
            prompt="Extract stories", temperature=0.0, max_tokens=256, top_p=0.9
        )

        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(top_stories_json)

            await _llm().generate_completions(_page(), top_stories_schema, options)

        kwargs = mock_completion.call_args.kwargs
        assert kwargs["temperature"] == 0.0
        assert kwargs["max_tokens"] == 256
        assert kwargs["top_p"] == 0.9
        assert kwargs["messages"][0]["content"] == "Extract stories"

    @pytest.mark.asyncio
    async def test_api_key_and_base_url_are_passed(
        self, top_stories_json, top_stories_schema
    ):
        """Configured credentials should be passed to LiteLLM."""
        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(top_stories_json)

            llm = _llm(llm_api_key="test-key", llm_base_url="http://localhost:8000/v1")
            await llm.generate_completions(_page(), top_stories_schema)

        kwargs = mock_completion.call_args.kwargs
        assert kwargs["api_key"] == "test-key"
        assert kwargs["base_url"] == "http://localhost:8000/v1"

    @pytest.mark.asyncio
    async def test_image_page_is_sent_as_multimodal_content(
        self, top_stories_json, top_stories_schema
    ):
        """Screenshot pages should be attached as an image part."""
        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(top_stories_json)

            await _llm().generate_completions(
                _page("image", "aW1hZ2U="), top_stories_schema
            )

        parts = mock_completion.call_args.kwargs["messages"][1]["content"]
        assert parts[1]["image_url"]["url"] == "data:image/png;base64,aW1hZ2U="

    @pytest.mark.asyncio
    async def test_prose_wrapped_response_is_recovered(
        self, top_stories_json, top_stories_schema
    ):
        """JSON surrounded by prose should still be extracted."""
        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(
                f"Here are the stories:\n\n{top_stories_json}\n\nLet me know!"
            )

            result = await _llm().generate_completions(_page(), top_stories_schema)

        assert len(result.data.top) == 2

    @pytest.mark.asyncio
    async def test_unrecoverable_response_raises_with_raw_text(self, top_stories_schema):
        """A response without usable JSON should raise ResponseParseError."""
        from llm_scraper.completion.errors import ResponseParseError

        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response("Sorry, I can't read that page.")

            with pytest.raises(ResponseParseError) as exc_info:
                await _llm().generate_completions(_page(), top_stories_schema)

        assert "Sorry, I can't read that page." in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_dict_content_is_json_encoded(self, top_stories_schema):
        """Non-string content should be JSON-encoded before validation."""
        content = {"top": [{"title": "Dict", "points": 3, "by": "dan"}]}

        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(content)

            result = await _llm().generate_completions(_page(), top_stories_schema)

        assert result.data.top[0].by == "dan"

    @pytest.mark.asyncio
    async def test_empty_response_raises_completion_error(self, top_stories_schema):
        """No content and no tool calls should raise CompletionError."""
        from llm_scraper.completion.errors import CompletionError

        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(None)

            with pytest.raises(CompletionError, match="no content"):
                await _llm().generate_completions(_page(), top_stories_schema)


class TestScraperLLMModes:
    """Tests for structured output modes."""

    @pytest.mark.asyncio
    async def test_auto_mode_passes_schema_as_response_format(
        self, top_stories_json, top_stories_schema
    ):
        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(top_stories_json)

            await _llm().generate_completions(_page(), top_stories_schema)

        kwargs = mock_completion.call_args.kwargs
        assert kwargs["response_format"] is top_stories_schema
        assert "tools" not in kwargs

    @pytest.mark.asyncio
    async def test_json_mode_requests_json_object(
        self, top_stories_json, top_stories_schema
    ):
        from llm_scraper.completion.models import ScraperLLMOptions

        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(top_stories_json)

            await _llm().generate_completions(
                _page(), top_stories_schema, ScraperLLMOptions(mode="json")
            )

        assert mock_completion.call_args.kwargs["response_format"] == {
            "type": "json_object"
        }

    @pytest.mark.asyncio
    async def test_tool_mode_forces_function_call_and_reads_arguments(
        self, top_stories_json, top_stories_schema
    ):
        from llm_scraper.completion.llm import EXTRACTION_TOOL_NAME
        from llm_scraper.completion.models import ScraperLLMOptions

        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(
                "Calling the tool now.", tool_calls=[_DummyToolCall(top_stories_json)]
            )

            result = await _llm().generate_completions(
                _page(), top_stories_schema, ScraperLLMOptions(mode="tool")
            )

        kwargs = mock_completion.call_args.kwargs
        assert "response_format" not in kwargs
        assert kwargs["tools"][0]["function"]["name"] == EXTRACTION_TOOL_NAME
        assert kwargs["tools"][0]["function"]["parameters"] == (
            top_stories_schema.model_json_schema()
        )
        assert kwargs["tool_choice"]["function"]["name"] == EXTRACTION_TOOL_NAME
        assert result.data.top[0].points == 42

    @pytest.mark.asyncio
    async def test_tool_arguments_stand_in_for_blank_content(
        self, top_stories_json, top_stories_schema
    ):
        """Outside tool mode, an empty or whitespace reply falls back to tool arguments."""
        from llm_scraper.completion.models import ScraperLLMOptions

        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(
                "  \n", tool_calls=[_DummyToolCall(top_stories_json)]
            )

            result = await _llm().generate_completions(
                _page(), top_stories_schema, ScraperLLMOptions(mode="json")
            )

        assert result.data.top[0].by == "alice"

    @pytest.mark.asyncio
    async def test_blank_response_raises_completion_error(self, top_stories_schema):
        from llm_scraper.completion.errors import CompletionError

        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response("")

            with pytest.raises(CompletionError, match="no content"):
                await _llm().generate_completions(_page(), top_stories_schema)

    @pytest.mark.asyncio
    async def test_tool_arguments_stand_in_for_missing_content(
        self, top_stories_json, top_stories_schema
    ):
        """Outside tool mode, tool-call arguments are used when content is None."""
        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.return_value = _response(
                None, tool_calls=[_DummyToolCall(top_stories_json)]
            )

            result = await _llm().generate_completions(_page(), top_stories_schema)

        assert len(result.data.top) == 2


class TestScraperLLMErrorHandling:
    """Tests for provider failures and retries."""

    @pytest.mark.asyncio
    async def test_provider_failure_raises_without_retry_by_default(
        self, top_stories_schema
    ):
        from llm_scraper.completion.errors import CompletionError

        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.side_effect = Exception("API Error")

            with pytest.raises(CompletionError) as exc_info:
                await _llm().generate_completions(_page(), top_stories_schema)

        assert "API Error" in str(exc_info.value)
        assert mock_completion.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_when_configured(self, top_stories_json, top_stories_schema):
        call_count = 0

        async def side_effect(*args, **kwargs):
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise Exception("Transient error")
            return _response(top_stories_json)

        with (
            patch(
                "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
            ) as mock_completion,
            patch("llm_scraper.completion.llm.asyncio.sleep", new_callable=AsyncMock),
        ):
            mock_completion.side_effect = side_effect

            result = await _llm(llm_max_retries=3).generate_completions(
                _page(), top_stories_schema
            )

        assert call_count == 3
        assert len(result.data.top) == 2

    @pytest.mark.asyncio
    async def test_parse_errors_are_not_retried(self, top_stories_schema):
        from llm_scraper.completion.errors import ResponseParseError

        with (
            patch(
                "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
            ) as mock_completion,
            patch("llm_scraper.completion.llm.asyncio.sleep", new_callable=AsyncMock),
        ):
            mock_completion.return_value = _response("not json")

            with pytest.raises(ResponseParseError):
                await _llm(llm_max_retries=3).generate_completions(
                    _page(), top_stories_schema
                )

        assert mock_completion.await_count == 1

    @pytest.mark.asyncio
    async def test_timeout_raises_completion_error(self, top_stories_schema):
        from litellm import Timeout

        from llm_scraper.completion.errors import CompletionError

        with patch(
            "llm_scraper.completion.llm.acompletion", new_callable=AsyncMock
        ) as mock_completion:
            mock_completion.side_effect = Timeout(
                message="slow", model="gpt-4o", llm_provider="openai"
            )

            with pytest.raises(CompletionError, match="timed out"):
                await _llm(llm_max_retries=2).generate_completions(
                    _page(), top_stories_schema
                )

        assert mock_completion.await_count == 1
