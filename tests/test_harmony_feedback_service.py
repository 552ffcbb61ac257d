from unittest.mock import MagicMock

import pytest
import requests

from opentutor.core.exceptions import UpstreamServiceError
from opentutor.services.harmony_feedback_service import HarmonyFeedbackGenerator, build_harmony_prompt


def _gemini_reply(text):
    return {
        "candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}],
        "usageMetadata": {"promptTokenCount": 120, "candidatesTokenCount": 80},
    }


def _generator(http, api_key="test-key"):
    return HarmonyFeedbackGenerator(api_key=api_key, model_name="gemini-2.5-flash", timeout=5, http=http)


def test_prompt_lists_notes_and_requests_tags():
    prompt = build_harmony_prompt(["C4", "Eb4"], "Practice session: blue_notes")
    assert "Notes: C4, Eb4" in prompt
    assert "Context: Practice session: blue_notes" in prompt
    for tag in ("SCORE:", "ACCURACY:", "BLUE_NOTES:", "SUGGESTION:"):
        assert tag in prompt


def test_generate_returns_text():
    http = MagicMock()
    http.post.return_value.json.return_value = _gemini_reply("  Nice line.\nSCORE: 90  ")

    text = _generator(http).generate(["C4", "E4"], "context")

    assert text == "Nice line.\nSCORE: 90"
    args, kwargs = http.post.call_args
    assert args[0].endswith("/gemini-2.5-flash:generateContent")
    assert kwargs["params"] == {"key": "test-key"}
    assert kwargs["timeout"] == 5
    assert "C4, E4" in kwargs["json"]["contents"][0]["parts"][0]["text"]


def test_missing_api_key_fails_without_request():
    http = MagicMock()
    with pytest.raises(UpstreamServiceError, match="API key"):
        _generator(http, api_key="").generate(["C4"], "context")
    http.post.assert_not_called()


def test_timeout_is_upstream_error():
    http = MagicMock()
    http.post.side_effect = requests.exceptions.Timeout("read timed out")
    with pytest.raises(UpstreamServiceError, match="timed out"):
        _generator(http).generate(["C4"], "context")


def test_http_error_keeps_underlying_message():
    response = requests.Response()
    response.status_code = 429
    response.reason = "Too Many Requests"
    response.url = "https://generativelanguage.googleapis.com/"
    response._content = b'{"error": {"message": "Resource has been exhausted"}}'

    http = MagicMock()
    http.post.return_value = response

    with pytest.raises(UpstreamServiceError, match="Resource has been exhausted") as excinfo:
        _generator(http).generate(["C4"], "context")
    assert excinfo.value.service == "gemini"


def test_empty_reply_is_upstream_error():
    http = MagicMock()
    http.post.return_value.json.return_value = _gemini_reply("   ")
    with pytest.raises(UpstreamServiceError, match="empty response"):
        _generator(http).generate(["C4"], "context")


def test_missing_candidates_is_upstream_error():
    http = MagicMock()
    http.post.return_value.json.return_value = {"promptFeedback": {"blockReason": "SAFETY"}}
    with pytest.raises(UpstreamServiceError, match="missing candidates"):
        _generator(http).generate(["C4"], "context")


def test_close_closes_http_session():
    http = MagicMock()
    _generator(http).close()
    http.close.assert_called_once()
