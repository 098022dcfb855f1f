"""
Value coercion shared by the provider normalizers.

Provider payloads mix ints, numeric strings, nulls and nested dicts for
the same logical field. These helpers coerce without raising so the
normalizers can substitute explicit defaults instead.
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.errors import PayloadValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def to_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def to_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def to_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def numeric_map(raw: Any) -> dict[str, float]:
    """Keep the numeric entries of a stat map, with stringified keys."""
    if not isinstance(raw, dict):
        return {}
    result: dict[str, float] = {}
    for key, value in raw.items():
        if isinstance(value, bool) or value is None:
            continue
        if isinstance(value, (int, float)):
            result[str(key)] = float(value)
            continue
        try:
            result[str(key)] = float(value)
        except (TypeError, ValueError):
            continue
    return result


def average_points(total: float, wins: int, losses: int) -> float:
    """Points per decided game; a team with no games averages 0."""
    return total / max(1, wins + losses)


def validate_payload(model: type[ModelT], raw: Any, provider: str) -> ModelT:
    """
    Validate a raw provider payload at the boundary.

    Raises:
        PayloadValidationError: If the payload does not fit ``model``
    """
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise PayloadValidationError(
            f"Malformed {provider} {model.__name__}: {e.error_count()} validation error(s)",
            provider=provider,
        ) from e


def first_present(*values: Any) -> Optional[Any]:
    """Return the first value that is neither None nor an empty string."""
    for value in values:
        if value is not None and value != "":
            return value
    return None


REGULAR_SEASON_FINAL_WEEK = 17


def playoff_weeks_from(start: Any, end: Any = None) -> list[int]:
    """
    Playoff weeks from a start week through ``end`` (default week 17).

    Missing or nonsensical input falls back to weeks 14-17.
    """
    first = to_int(start)
    last = to_int(end, REGULAR_SEASON_FINAL_WEEK) or REGULAR_SEASON_FINAL_WEEK
    if first <= 0 or first > last:
        return [14, 15, 16, 17]
    return list(range(first, last + 1))
