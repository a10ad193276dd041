"""Splits a bulk text block into numbered lines."""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class ParsedLine:
    """One non-blank line of a block.

    Attributes:
        ordinal: 1-based position of the line within the block
        text: Line content with surrounding whitespace removed
    """

    ordinal: int
    text: str


def parse_block(raw_block: str) -> List[ParsedLine]:
    """Number the lines of a block, skipping blank ones.

    Blank or whitespace-only lines still consume an ordinal, which is how a
    caller leaves a gap in the numbering:

        >>> parse_block("a\\n\\nb\\nc")
        [ParsedLine(ordinal=1, text='a'), ParsedLine(ordinal=3, text='b'), ParsedLine(ordinal=4, text='c')]
    """
    return [
        ParsedLine(ordinal=position, text=line.strip())
        for position, line in enumerate(raw_block.splitlines(), start=1)
        if line.strip()
    ]


__all__ = ["ParsedLine", "parse_block"]
