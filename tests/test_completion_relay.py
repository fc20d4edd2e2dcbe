"""Unit tests for CompletionRelay."""
import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'novelist'))

import pytest
from unittest.mock import Mock
from services.completion_relay import CompletionRelay, CAPITAL_START, LOWERCASE_START
from services.llm_client import LLMResponse, LLMClientError, LLMError


def _llm_returning(text):
    llm_client = Mock()
    llm_client.generate.return_value = LLMResponse(
        text=text,
        tokens_input=300,
        tokens_output=40,
        latency_ms=120,
        model_used="test-model"
    )
    return llm_client


def _words(count):
    return " ".join(f"word{i}" for i in range(1, count + 1))


class TestVerifyAccessCode:
    """Access-code gate."""

    def test_matching_code_succeeds(self):
        relay = CompletionRelay(access_code="open-sesame")
        assert relay.verify_access_code("open-sesame") is True

    @pytest.mark.parametrize("code", ["wrong", "open-sesam", "open-sesame ", "OPEN-SESAME", ""])
    def test_other_codes_fail(self, code):
        relay = CompletionRelay(access_code="open-sesame")
        assert relay.verify_access_code(code) is False

    def test_missing_code_fails(self):
        relay = CompletionRelay(access_code="open-sesame")
        assert relay.verify_access_code(None) is False

    @pytest.mark.parametrize("code", [1234, ["1234"], {"code": "1234"}, b"1234"])
    def test_non_string_codes_fail(self, code):
        relay = CompletionRelay(access_code="1234")
        assert relay.verify_access_code(code) is False

    def test_unconfigured_secret_rejects_everything(self):
        relay = CompletionRelay(access_code="")
        assert relay.verify_access_code("") is False
        assert relay.verify_access_code(None) is False
        assert relay.verify_access_code("anything") is False


class TestPrompt:
    """Prompt construction and capitalization directive."""

    @pytest.mark.parametrize("context", [
        "He drew his sword.",
        "Who goes there?",
        "Run!",
        "The gate closed.  ",
        "The gate closed.\n",
    ])
    def test_sentence_end_asks_for_capital_start(self, context):
        assert CompletionRelay.capitalization_instruction(context) == CAPITAL_START

    @pytest.mark.parametrize("context", [
        "He drew his",
        "He paused,",
        "The knight said:",
        "",
        "3.5 miles",
    ])
    def test_mid_sentence_asks_for_lowercase_start(self, context):
        assert CompletionRelay.capitalization_instruction(context) == LOWERCASE_START

    def test_build_prompt_embeds_all_inputs(self):
        prompt = CompletionRelay.build_prompt(
            protagonist="Sir Cedric, a weary knight",
            outline="A quest for the Grail",
            author="Herman Hesse",
            story_context="The abbey bells rang out"
        )

        assert "Sir Cedric, a weary knight" in prompt
        assert "A quest for the Grail" in prompt
        assert "Herman Hesse" in prompt
        assert '"The abbey bells rang out"' in prompt
        assert prompt.rstrip().endswith(LOWERCASE_START)

    def test_build_prompt_capital_directive(self):
        prompt = CompletionRelay.build_prompt("p", "o", "a", "The bells rang.")
        assert CAPITAL_START in prompt
        assert LOWERCASE_START not in prompt


class TestGenerate:
    """Generation, token budget and trimming."""

    def test_default_word_count_budget_and_trim(self):
        llm_client = _llm_returning(_words(40))
        relay = CompletionRelay(llm_client=llm_client, access_code="x")

        result = relay.generate("p", "o", "a", "context words")

        llm_client.generate.assert_called_once()
        assert llm_client.generate.call_args.kwargs["max_tokens"] == 30
        assert result.text == _words(15)
        assert result.word_count == 15

    def test_zero_word_count_uses_default(self):
        llm_client = _llm_returning(_words(40))
        relay = CompletionRelay(llm_client=llm_client, access_code="x")

        result = relay.generate("p", "o", "a", "ctx", word_count=0)

        assert len(result.text.split()) == 15

    def test_explicit_word_count_trims_to_first_words(self):
        llm_client = _llm_returning("  " + _words(25) + "\n")
        relay = CompletionRelay(llm_client=llm_client, access_code="x")

        result = relay.generate("p", "o", "a", "ctx", word_count=10)

        assert llm_client.generate.call_args.kwargs["max_tokens"] == 20
        assert result.text == _words(10)

    def test_short_reply_is_kept_whole(self):
        llm_client = _llm_returning(" and then\nhe  slept. ")
        relay = CompletionRelay(llm_client=llm_client, access_code="x")

        result = relay.generate("p", "o", "a", "ctx")

        assert result.text == "and then he slept."

    def test_prompt_passed_to_provider(self):
        llm_client = _llm_returning("onward")
        relay = CompletionRelay(llm_client=llm_client, access_code="x")

        relay.generate("Sir Cedric", "The Grail", "Hesse", "He rode north.")

        prompt = llm_client.generate.call_args.kwargs["prompt"]
        assert "Sir Cedric" in prompt
        assert CAPITAL_START in prompt

    def test_prompt_tokens_counted_with_encoder(self):
        encoder = Mock()
        encoder.encode.return_value = [1] * 123
        relay = CompletionRelay(llm_client=_llm_returning("onward"), access_code="x", token_encoder=encoder)

        result = relay.generate("p", "o", "a", "ctx")

        assert result.prompt_tokens == 123

    def test_requests_do_not_share_word_count(self):
        llm_client = _llm_returning(_words(40))
        relay = CompletionRelay(llm_client=llm_client, access_code="x")

        first = relay.generate("p", "o", "a", "ctx", word_count=5)
        second = relay.generate("p", "o", "a", "ctx")

        assert len(first.text.split()) == 5
        assert len(second.text.split()) == 15

    def test_provider_error_propagates(self):
        llm_client = Mock()
        llm_client.generate.side_effect = LLMClientError(LLMError(code="API_ERROR", message="down", details={}))
        relay = CompletionRelay(llm_client=llm_client, access_code="x")

        with pytest.raises(LLMClientError):
            relay.generate("p", "o", "a", "ctx")
        assert llm_client.generate.call_count == 1

    def test_missing_llm_client_raises(self):
        relay = CompletionRelay(llm_client=None, access_code="x")

        with pytest.raises(RuntimeError, match="GROQ_API_KEY"):
            relay.generate("p", "o", "a", "ctx")
