from __future__ import annotations  # Resume and job-description parsing with fallback records

import logging
from typing import Any, Callable, TypeVar

from pydantic import BaseModel

from agents import fallback
from agents.types import StructuredProfile, StructuredRole
from config.registry import PROFILE_PARSER_KEY, ROLE_PARSER_KEY, get_model

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _parse(key: str, schema: type[T], text: str, on_failure: Callable[[str], T]) -> T:  # Call a bound parser or fall back
    try:
        raw: Any = get_model(key)(inputs={"text": text})
        return schema.model_validate(raw.model_dump() if hasattr(raw, "model_dump") else raw)
    except Exception as exc:  # noqa: BLE001
        logger.warning("%s failed, using mock record: %s", key, exc)
        return on_failure(text)


def parse_profile(text: str) -> StructuredProfile:  # Structured resume record
    return _parse(PROFILE_PARSER_KEY, StructuredProfile, text, fallback.mock_profile)


def parse_role(text: str) -> StructuredRole:  # Structured role record; description always echoes the input
    role = _parse(ROLE_PARSER_KEY, StructuredRole, text, fallback.mock_role)
    if role.description != text:
        role = role.model_copy(update={"description": text})
    return role
