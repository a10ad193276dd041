"""Sample verses for a fresh database.

Seeded without vectors; run `ingest --missing` afterwards to embed them.
"""

from typing import List, Tuple

from loguru import logger

from .base import VectorStore

SAMPLE_PROVERBS: List[Tuple[int, int, str]] = [
    (1, 1, "The proverbs of Solomon the son of David, king of Israel;"),
    (1, 2, "To know wisdom and instruction; to perceive the words of understanding;"),
    (1, 3, "To receive the instruction of wisdom, justice, and judgment, and equity;"),
    (1, 7, "The fear of the LORD is the beginning of knowledge: but fools despise wisdom and instruction."),
    (3, 5, "Trust in the LORD with all thine heart; and lean not unto thine own understanding."),
    (3, 6, "In all thy ways acknowledge him, and he shall direct thy paths."),
    (4, 7, "Wisdom is the principal thing; therefore get wisdom: and with all thy getting get understanding."),
    (16, 18, "Pride goeth before destruction, and an haughty spirit before a fall."),
    (22, 6, "Train up a child in the way he should go: and when he is old, he will not depart from it."),
    (27, 17, "Iron sharpeneth iron; so a man sharpeneth the countenance of his friend."),
]


def seed_store(store: VectorStore) -> int:
    """Upsert the sample verses. Returns the number written."""
    for chapter, verse, text in SAMPLE_PROVERBS:
        store.upsert_by_key(chapter, verse, text)
    logger.info(f"Inserted {len(SAMPLE_PROVERBS)} sample proverbs")
    return len(SAMPLE_PROVERBS)


__all__ = ["SAMPLE_PROVERBS", "seed_store"]
