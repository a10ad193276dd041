"""Field checks applied before any store call."""

from typing import Any

from proverbs.shared.exceptions import ValidationError


def _require_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer")
    return value


def validate_group_key(group_key: Any, min_group: int, max_group: int) -> int:
    group_key = _require_int(group_key, "Chapter")
    if not min_group <= group_key <= max_group:
        raise ValidationError(f"Chapter must be between {min_group} and {max_group}")
    return group_key


def validate_ordinal(ordinal: Any) -> int:
    ordinal = _require_int(ordinal, "Verse")
    if ordinal < 1:
        raise ValidationError("Verse must be at least 1")
    return ordinal


def validate_text(text: Any) -> str:
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Text must be a non-empty string")
    return text.strip()


def validate_item_id(item_id: Any) -> int:
    item_id = _require_int(item_id, "Id")
    if item_id < 1:
        raise ValidationError(f"Invalid id: {item_id}")
    return item_id


__all__ = ["validate_group_key", "validate_ordinal", "validate_text", "validate_item_id"]
