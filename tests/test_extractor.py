"""Tests for extraction.extractor and the prompt builder."""

from unittest.mock import MagicMock

import httpx
import anthropic
import pytest

from extraction import llm
from extraction.extractor import extract_prices, parse_candidates
from extraction.llm import build_extraction_prompt
from models import MissingCredentialsError


class TestParseCandidates:
    """Tests for parse_candidates."""

    def test_plain_array(self):
        raw = '[{"material": "Steel Rebar", "price_numeric": 38500, "currency": "EGP"}]'
        candidates = parse_candidates(raw)

        assert len(candidates) == 1
        assert candidates[0].material == "Steel Rebar"
        assert candidates[0].price_numeric == 38500

    def test_code_fence(self):
        raw = '```json\n[{"material": "Cement"}]\n```'
        assert [c.material for c in parse_candidates(raw)] == ["Cement"]

    def test_array_embedded_in_prose(self):
        raw = 'Here are the prices:\n[{"material": "Cement", "price_text": "1,850 EGP"}]\nHope this helps.'
        candidates = parse_candidates(raw)

        assert len(candidates) == 1
        assert candidates[0].price_text == "1,850 EGP"

    def test_wrapped_object(self):
        raw = '{"items": [{"material": "Concrete"}]}'
        assert [c.material for c in parse_candidates(raw)] == ["Concrete"]

    def test_only_items_and_prices_wrappers_unwrapped(self):
        assert [c.material for c in parse_candidates('{"prices": [{"material": "Sand"}]}')] == ["Sand"]
        assert parse_candidates('{"results": [{"material": "Cement"}]}') == []
        assert parse_candidates('{"data": [{"material": "Cement"}]}') == []

    @pytest.mark.parametrize(
        "raw",
        [None, "", "no prices found", "[not json", '{"material": "Cement"}', "42", "[1, 2"],
    )
    def test_unusable_payload_returns_empty(self, raw):
        assert parse_candidates(raw) == []

    def test_non_object_items_skipped(self):
        raw = '[1, "text", null, {"material": "Cement"}]'
        assert [c.material for c in parse_candidates(raw)] == ["Cement"]

    def test_unknown_keys_ignored(self):
        candidates = parse_candidates('[{"material": "Cement", "confidence": 0.9}]')
        assert "confidence" not in candidates[0].model_dump()


class TestExtractPrices:
    """Tests for extract_prices."""

    def test_empty_text_skips_service(self):
        complete = MagicMock()
        assert extract_prices("", "https://example.com", complete=complete) == []
        complete.assert_not_called()

    def test_prompt_carries_text_and_url(self):
        complete = MagicMock(return_value="[]")
        extract_prices("Cement 1850 EGP/ton", "https://example.com/p", complete=complete)

        prompt = complete.call_args[0][0]
        assert "Cement 1850 EGP/ton" in prompt
        assert "https://example.com/p" in prompt

    def test_returns_candidates(self):
        complete = MagicMock(return_value='[{"material": "Ordinary Portland Cement", "price_numeric": 1850}]')
        candidates = extract_prices("Cement 1850 EGP/ton", "https://example.com", complete=complete)
        assert candidates[0].material == "Ordinary Portland Cement"

    def test_service_error_returns_empty(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        complete = MagicMock(side_effect=anthropic.APITimeoutError(request=request))
        assert extract_prices("some text", "https://example.com", complete=complete) == []

    def test_missing_credentials_propagate(self):
        complete = MagicMock(side_effect=MissingCredentialsError("ANTHROPIC_API_KEY is not set"))
        with pytest.raises(MissingCredentialsError):
            extract_prices("some text", "https://example.com", complete=complete)


class TestLlm:
    """Tests for the LLM boundary."""

    def test_prompt_demands_json_array_in_egp(self):
        prompt = build_extraction_prompt("TEXT BODY", "https://example.com")
        assert "ONLY a JSON array" in prompt
        assert "EGP" in prompt
        assert "price_numeric" in prompt
        assert prompt.rstrip().endswith("TEXT BODY")

    def test_missing_key_raises(self, monkeypatch):
        monkeypatch.setattr(llm, "ANTHROPIC_API_KEY", None)
        monkeypatch.setattr(llm, "_client", None)
        with pytest.raises(MissingCredentialsError):
            llm.request_completion("prompt")

    def test_request_completion_returns_text(self, monkeypatch):
        client = MagicMock()
        client.messages.create.return_value = MagicMock(content=[MagicMock(text="  []  ")])
        monkeypatch.setattr(llm, "ANTHROPIC_API_KEY", "test-key")
        monkeypatch.setattr(llm, "_client", client)

        assert llm.request_completion("prompt") == "[]"
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
