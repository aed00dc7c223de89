"""Semantic field matching backed by Google Gemini.

The model receives the normalized control descriptors together with the
caller's field data and answers with a ``fieldMappings`` object that maps
control ids to field names. Any failure along the way makes the matcher
report itself unavailable so the caller can fall back to rule matching.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Callable, Mapping, Optional, Sequence

import google.generativeai as genai

from .config import FillerConfig, load_config
from .errors import SemanticMatchError
from .matching import FieldMatcher
from .models import ControlDescriptor, FieldEntry, FieldMapping

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a form-filling assistant. Match form data fields to form elements based on "
    "semantic meaning, not just exact matches. For each form element, find the most "
    "appropriate field from the provided form data. Return a mapping of element IDs to "
    "field names as a JSON object of the form {\"fieldMappings\": {\"<element id>\": \"<field name>\"}}."
)

Generate = Callable[[str], str]


def configure_gemini(api_key: str) -> None:
    """Configure the Google Gemini client with ``api_key``.

    Raises:
        ValueError: If no API key is given.
    """
    if not api_key:
        raise ValueError("Google API key not found. Set GOOGLE_API_KEY or pass api_key.")
    genai.configure(api_key=api_key)


def build_request(controls: Sequence[ControlDescriptor], fields: Mapping[str, FieldEntry]) -> str:
    """Serialize the matching request sent to the model as one JSON document."""

    payload = {
        "formElements": [control.to_payload() for control in controls],
        "formData": {name: entry.to_payload() for name, entry in fields.items()},
    }
    return json.dumps(payload, ensure_ascii=False)


def _extract_json_dict(candidate_text: str) -> dict[str, object]:
    """Extract a JSON object from Gemini output."""

    try:
        return json.loads(candidate_text)
    except json.JSONDecodeError:
        match = re.search(r"\{.*\}", candidate_text, flags=re.DOTALL)
        if not match:
            raise
        return json.loads(match.group(0))


def parse_field_mappings(raw_text: str) -> FieldMapping:
    """Read ``fieldMappings`` out of a model reply.

    Raises:
        SemanticMatchError: If the reply is not a JSON object carrying a
            string-to-string ``fieldMappings`` object.
    """

    try:
        data = _extract_json_dict(raw_text or "")
    except json.JSONDecodeError as exc:
        raise SemanticMatchError(f"Reply is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise SemanticMatchError("Reply is not a JSON object")
    mappings = data.get("fieldMappings")
    if not isinstance(mappings, dict):
        raise SemanticMatchError("Reply has no fieldMappings object")

    return {
        str(element_id): field_name
        for element_id, field_name in mappings.items()
        if isinstance(field_name, str)
    }


class GeminiFieldMatcher(FieldMatcher):
    """Delegate field matching to Gemini. One attempt, no retries."""

    name = "semantic"

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        config: Optional[FillerConfig] = None,
        generate: Optional[Generate] = None,
    ) -> None:
        self.config = config or load_config()
        self.api_key = api_key or self.config.api_key
        self._generate = generate or self._generate_with_gemini

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def match(
        self,
        controls: Sequence[ControlDescriptor],
        fields: Mapping[str, FieldEntry],
    ) -> Optional[FieldMapping]:
        if not self.api_key:
            logger.error("[Gemini] API key not found; semantic matching unavailable")
            return None

        try:
            raw_text = self._generate(build_request(controls, fields))
            logger.debug("[Gemini] Raw field-matching response: %s", raw_text)
            mapping = parse_field_mappings(raw_text)
        except Exception as exc:
            logger.error("[Gemini] Field matching failed: %s", exc)
            return None

        logger.info("[Gemini] Proposed %d field mapping(s)", len(mapping))
        return mapping

    def _generate_with_gemini(self, request: str) -> str:
        configure_gemini(self.api_key)
        model = genai.GenerativeModel(
            self.config.model_name,
            system_instruction=SYSTEM_PROMPT,
            generation_config={
                "temperature": self.config.temperature,
                "response_mime_type": "application/json",
            },
        )
        response = model.generate_content(request)

        candidate = next((c for c in response.candidates if c.content.parts), None)
        if candidate is None:
            raise SemanticMatchError(
                "Gemini returned no content (finish_reason=%s)"
                % (getattr(response.candidates[0], "finish_reason", "unknown") if response.candidates else "none")
            )
        return "".join(getattr(part, "text", "") for part in candidate.content.parts)


__all__ = [
    "GeminiFieldMatcher",
    "SYSTEM_PROMPT",
    "build_request",
    "configure_gemini",
    "parse_field_mappings",
]
