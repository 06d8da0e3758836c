"""Translation provider protocol and shared helpers.

Every backend satisfies ``TranslationProvider``.  The concrete providers
differ only in how they talk to their HTTP API; prompt construction,
response parsing and the request plumbing live here as plain functions.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Protocol

import requests

from i18n_nexus.errors import TranslationServiceError
from i18n_nexus.sync.models import TranslationResult, ValidationResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class TranslationProvider(Protocol):
    """Protocol that all translation backends must satisfy."""

    name: str

    async def translate(
        self, content: dict[str, Any], target_language: str
    ) -> TranslationResult:
        """Translate the values of a flat ``{path: text}`` mapping.

        Args:
            content: Dotted key paths mapped to base language values.
            target_language: Target language code.

        Returns:
            The translated mapping (same keys) and the tokens used.

        Raises:
            TranslationServiceError: If the backend call fails or the
                response cannot be parsed.
        """
        ...  # pragma: no cover

    async def validate_translation(
        self,
        original: dict[str, Any],
        translated: dict[str, Any],
        target_language: str,
    ) -> ValidationResult:
        """Ask the backend whether *translated* is a faithful translation.

        Args:
            original: Base language tree.
            translated: Merged target language tree.
            target_language: Target language code.

        Returns:
            The verdict and the tokens used.
        """
        ...  # pragma: no cover


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def build_translation_prompt(
    content: dict[str, Any], target_language: str
) -> str:
    return (
        f"Translate the following JSON content to {target_language}. "
        "Maintain the JSON structure and keys. Only translate the values. "
        "Ensure the translation is culturally appropriate and uses common "
        "expressions in the target language. Respond with the JSON object "
        "only:\n\n"
        f"{json.dumps(content, indent=2, ensure_ascii=False)}"
    )


def build_validation_prompt(
    original: dict[str, Any],
    translated: dict[str, Any],
    target_language: str,
) -> str:
    return (
        "Validate the following translation from the original language to "
        f"{target_language}. Check if the translation maintains the correct "
        "meaning, is culturally appropriate, and uses common expressions in "
        "the target language. Respond with 'true' if the translation is "
        "correct, or 'false' if there are any issues.\n\n"
        "Original content:\n"
        f"{json.dumps(original, indent=2, ensure_ascii=False)}\n\n"
        "Translated content:\n"
        f"{json.dumps(translated, indent=2, ensure_ascii=False)}"
    )


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def extract_json_object(text: str, provider: str) -> dict[str, Any]:
    """Parse the first ``{...}`` block of a model reply.

    Raises:
        TranslationServiceError: If no JSON object can be parsed.
    """
    match = _JSON_OBJECT.search(text)
    if match is None:
        raise TranslationServiceError(
            f"{provider}: no valid JSON found in the response"
        )
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise TranslationServiceError(
            f"{provider}: failed to parse response as JSON: {exc}"
        ) from exc
    if not isinstance(data, dict):
        raise TranslationServiceError(
            f"{provider}: response JSON is not an object"
        )
    return data


def parse_validation_response(text: str) -> bool:
    """A validation reply counts as valid when it contains ``true``."""
    return "true" in text.lower()


# ---------------------------------------------------------------------------
# HTTP plumbing
# ---------------------------------------------------------------------------


def create_session(headers: dict[str, str]) -> requests.Session:
    session = requests.Session()
    session.headers.update(headers)
    return session


def post_json(
    session: requests.Session,
    url: str,
    payload: dict[str, Any],
    provider: str,
    timeout: float = DEFAULT_TIMEOUT,
    params: dict[str, str] | None = None,
) -> dict[str, Any]:
    """POST *payload* as JSON and return the decoded JSON response.

    Raises:
        TranslationServiceError: On transport errors, non-2xx statuses or a
            non-JSON body.
    """
    logger.debug("%s: calling %s", provider, url)
    try:
        response = session.post(
            url, json=payload, params=params, timeout=(10, timeout)
        )
        response.raise_for_status()
        return response.json()
    except requests.RequestException as exc:
        raise TranslationServiceError(
            f"{provider}: API call failed: {exc}"
        ) from exc
    except ValueError as exc:
        raise TranslationServiceError(
            f"{provider}: API returned invalid JSON: {exc}"
        ) from exc
