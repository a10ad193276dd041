"""Vector validation and pgvector literal encoding."""

import math
from typing import Any, List, Optional, Sequence

from .exceptions import ValidationError

Vector = List[float]


def validate_vector(vector: Any, dimension: int) -> Vector:
    """Check a caller-supplied vector and return it as a list of floats.

    Args:
        vector: Candidate vector (any sequence of numbers)
        dimension: Required length

    Returns:
        The vector as a new list of floats

    Raises:
        ValidationError: Not a sequence, wrong length, or non-finite/non-numeric entries
    """
    if vector is None or isinstance(vector, (str, bytes)) or not isinstance(vector, Sequence):
        raise ValidationError(
            f"Invalid vector format. Expected array of {dimension} floats."
        )
    if len(vector) != dimension:
        raise ValidationError(
            f"Invalid vector format. Expected array of {dimension} floats, got {len(vector)}."
        )

    values: Vector = []
    for value in vector:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError("Vector entries must be numbers")
        value = float(value)
        if not math.isfinite(value):
            raise ValidationError("Vector entries must be finite")
        values.append(value)
    return values


def format_vector_literal(vector: Sequence[float]) -> str:
    """Represent a numeric vector as a Postgres-compatible literal."""
    return "[" + ",".join(str(float(value)) for value in vector) + "]"


def parse_vector_literal(literal: Optional[str]) -> Optional[Vector]:
    """Parse a pgvector text literal (`[1,2,3]`) back into floats."""
    if literal is None:
        return None
    body = literal.strip()
    if body.startswith("[") and body.endswith("]"):
        body = body[1:-1]
    if not body.strip():
        return []
    return [float(part) for part in body.split(",")]


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine distance (1 - cosine similarity).

    A zero-norm vector has no direction; it is treated as orthogonal to
    everything (distance 1.0).
    """
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    if norm_a == 0.0 or norm_b == 0.0:
        return 1.0
    return 1.0 - dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


__all__ = [
    "Vector",
    "validate_vector",
    "format_vector_literal",
    "parse_vector_literal",
    "cosine_distance",
]
