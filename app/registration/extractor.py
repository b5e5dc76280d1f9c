"""Extract profile fields from free text via the LLM, then validate them.

The LLM is treated as an untyped oracle: its completion is parsed into a
ParseOutcome (Valid / Malformed / Failed) and only Valid payloads reach the
validator. Any failure yields an empty result, never a partial one, and
never an exception into the caller.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Union

from app.registration.errors import InvalidInputError
from app.registration.fields import FieldDefinition, fields_for
from app.registration.models import Profile
from app.registration.prompts import ChatMessage, PromptBuilder
from app.registration.validator import validate_field, validate_fields

logger = logging.getLogger(__name__)

GenerateResponse = Callable[[list[ChatMessage]], Awaitable[str]]
SparseFields = dict[str, Any]

_FENCE_RE = re.compile(r"^```(?:json|JSON)?\s*(.*?)\s*```$", re.DOTALL)


@dataclass(frozen=True, slots=True)
class Valid:
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Malformed:
    reason: str


@dataclass(frozen=True, slots=True)
class Failed:
    error: str


ParseOutcome = Union[Valid, Malformed, Failed]


def _strip_fences(raw: str) -> str:
    text = raw.strip()
    match = _FENCE_RE.match(text)
    return match.group(1) if match else text


def parse_payload(raw: Any) -> ParseOutcome:
    """Parse an LLM completion into field→value pairs.

    Accepts a flat object ({"age": 28, ...}) or the envelope
    {"hasData": bool, "data": {"fields": {...}} | null}. Anything else is
    Malformed.
    """
    if not isinstance(raw, str):
        return Malformed(f"completion is {type(raw).__name__}, not str")

    text = _strip_fences(raw)
    if not text:
        return Malformed("empty completion")

    try:
        payload = json.loads(text)
    except ValueError as exc:
        return Malformed(f"invalid JSON: {exc}")
    except RecursionError:
        return Malformed("JSON nested too deeply")

    if not isinstance(payload, dict):
        return Malformed(f"top-level JSON is {type(payload).__name__}, not object")

    if "hasData" in payload or "data" in payload:
        if payload.get("hasData") is False or payload.get("data") is None:
            return Valid({})
        data = payload["data"]
        if isinstance(data, dict) and isinstance(data.get("fields"), dict):
            return Valid(dict(data["fields"]))
        return Malformed("envelope without data.fields object")

    return Valid(payload)


class ProfileExtractor:
    def __init__(self, generate_response: GenerateResponse, prompts: PromptBuilder | None = None):
        self._generate = generate_response
        self._prompts = prompts or PromptBuilder()

    async def _complete(self, messages: list[ChatMessage]) -> ParseOutcome:
        """One LLM call, no retry. CancelledError propagates."""
        try:
            raw = await self._generate(messages)
        except Exception as exc:
            return Failed(f"{type(exc).__name__}: {exc}")
        logger.debug("LLM extraction payload: %r", raw)
        try:
            return parse_payload(raw)
        except Exception as exc:
            return Malformed(f"{type(exc).__name__}: {exc}")

    async def extract(
        self,
        user: Profile,
        text: str,
        fields: list[str] | tuple[str, ...] | None = None,
    ) -> SparseFields:
        """Extract and validate profile fields from `text`.

        `fields` names the target keys; by default every profile field not
        yet set on `user`. Returns only the fields that validated.

        Raises InvalidInputError for empty text or a non-Profile user.
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("text must be a non-empty string")
        if not isinstance(user, Profile):
            raise InvalidInputError(f"user must be a Profile, got {type(user).__name__}")

        keys = list(fields) if fields is not None else user.missing_fields()
        definitions = fields_for(keys)
        if not definitions:
            return {}

        prompt = self._prompts.build_profile_parsing_prompt(
            text.strip(), definitions, user.collected_fields()
        )
        outcome = await self._complete(prompt)

        if isinstance(outcome, Failed):
            logger.warning("Extraction failed for user %s: %s", user.id, outcome.error)
            return {}
        if isinstance(outcome, Malformed):
            logger.warning("Malformed extraction payload for user %s: %s", user.id, outcome.reason)
            return {}

        try:
            result = validate_fields(outcome.fields, definitions)
        except Exception as exc:
            logger.warning("Validation failed for user %s: %s: %s", user.id, type(exc).__name__, exc)
            return {}
        rejected = [
            d.key for d in definitions
            if outcome.fields.get(d.key) is not None and d.key not in result
        ]
        if rejected:
            logger.info("Rejected extracted fields for user %s: %s", user.id, rejected)
        return result

    async def extract_universal(
        self,
        text: str,
        definitions: list[FieldDefinition],
    ) -> dict[str, Any]:
        """Generalised parser: every requested key maps to a value or None."""
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("text must be a non-empty string")

        empty = {d.key: None for d in definitions}
        if not definitions:
            return empty

        prompt = self._prompts.build_universal_parsing_prompt(text.strip(), definitions)
        outcome = await self._complete([{"role": "user", "content": prompt}])
        if not isinstance(outcome, Valid):
            logger.warning("Universal parse produced no data: %s", outcome)
            return empty

        try:
            return {d.key: validate_field(d, outcome.fields.get(d.key)) for d in definitions}
        except Exception as exc:
            logger.warning("Universal validation failed: %s: %s", type(exc).__name__, exc)
            return empty
