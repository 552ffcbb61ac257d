"""
Harmony feedback from the Google Gemini API.

The generator is a process-scoped resource: it owns one HTTP session that is
created at application startup, reused by every request and closed at
shutdown.
"""
import logging
from typing import List, Optional

import requests

from opentutor.core.config import settings
from opentutor.core.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

HARMONY_PROMPT = """As a jazz theory expert, analyze these notes briefly and concisely:

Notes: {notes}
Context: {context}

Provide a brief but constructive analysis (2 paragraphs max) covering:
1. Blue notes identified (if any)
2. Harmonic quality (major/minor/dominant/etc)
3. One specific suggestion for improvement

Be encouraging and constructive. Keep it brief - students want quick feedback during practice.
Use plaintext only, no markdown formatting.

Be reasonably tough with grading, taking points and accuracy off for small mistakes, even if taking just 5 score points off. Wrong notes should be more inaccurate. But don't be too tough, no need to have less than a 93 if very close.
Accuracy should only be taken off for notes and accidentals outside of harmony, moreso for notes.
Don't state 'analysis' at the top of your response. Your response should just be the response.

End your response with exactly these lines:
SCORE: <integer 0-100>
ACCURACY: <integer 0-100>
BLUE_NOTES: <comma-separated notes, or none>
CHORDS: <comma-separated chord symbols, or none>
SUGGESTION: <one sentence>
"""


def build_harmony_prompt(note_names: List[str], context: str) -> str:
    return HARMONY_PROMPT.format(notes=", ".join(note_names), context=context)


class HarmonyFeedbackGenerator:
    """Sends played notes to Gemini and returns its free-text feedback."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None
    ):
        self.api_key = api_key if api_key is not None else settings.google_gemini_api_key
        self.model_name = model_name or settings.gemini_model
        self.timeout = timeout or settings.gemini_timeout_seconds
        self.http = http or requests.Session()
        self.http.headers.update({"Content-Type": "application/json"})

        logger.info(f"HarmonyFeedbackGenerator initialized. Model: {self.model_name}, API key present: {bool(self.api_key)}")
        if not self.api_key:
            logger.warning("Google Gemini API key not configured. Harmony analysis will fail.")

    @property
    def url(self) -> str:
        return f"{GEMINI_BASE_URL}/{self.model_name}:generateContent"

    def generate(self, note_names: List[str], context: str) -> str:
        """
        Ask the model for feedback on a sequence of notes.

        Args:
            note_names: Note labels in playing order, e.g. ["C4", "Eb4"]
            context: Free-text description of the practice session

        Returns:
            The model's reply, stripped of surrounding whitespace

        Raises:
            UpstreamServiceError: On missing configuration, network failure,
                                  timeout, HTTP error or an empty reply
        """
        if not self.api_key:
            raise UpstreamServiceError(
                "Google Gemini API key not configured. Set GOOGLE_GEMINI_API_KEY.",
                service="gemini"
            )

        payload = {
            "contents": [{
                "parts": [{
                    "text": build_harmony_prompt(note_names, context)
                }]
            }],
            "generationConfig": {
                "temperature": 0.7,
                "topK": 40,
                "topP": 0.95,
                "maxOutputTokens": 1024,
            }
        }

        logger.debug(f"Requesting harmony feedback for {len(note_names)} notes")
        try:
            response = self.http.post(
                self.url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            logger.error(f"Gemini API request timed out after {self.timeout}s")
            raise UpstreamServiceError(
                f"Failed to analyze harmony: request timed out after {self.timeout}s",
                service="gemini"
            ) from e
        except requests.exceptions.RequestException as e:
            error_msg = f"Failed to analyze harmony: {str(e)}"
            if getattr(e, "response", None) is not None:
                try:
                    error_msg += f" - {e.response.json()}"
                except ValueError:
                    error_msg += f" - Status: {e.response.status_code}"
            logger.error(error_msg)
            raise UpstreamServiceError(error_msg, service="gemini") from e
        except ValueError as e:
            logger.error(f"Gemini API returned a non-JSON body: {e}")
            raise UpstreamServiceError("Failed to analyze harmony: invalid response body", service="gemini") from e

        return self._extract_text(data)

    def _extract_text(self, data: dict) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            raise UpstreamServiceError("Failed to analyze harmony: response missing candidates", service="gemini")

        content = candidates[0].get("content") or {}
        parts = content.get("parts") or []
        text = "".join(part.get("text", "") for part in parts).strip()
        if not text:
            finish_reason = candidates[0].get("finishReason", "unknown")
            raise UpstreamServiceError(
                f"Failed to analyze harmony: model returned empty response (finishReason: {finish_reason})",
                service="gemini"
            )
        return text

    def close(self) -> None:
        self.http.close()
