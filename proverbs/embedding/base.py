"""EmbeddingProvider abstract interface."""

from abc import ABC, abstractmethod

from proverbs.shared.vectors import Vector


class EmbeddingProvider(ABC):
    """Maps text to a fixed-dimension vector.

    Implementations raise ProviderError for every failure (timeout, rate
    limit, malformed or wrong-length response) so callers can handle one
    exception type.
    """

    dimension: int

    @abstractmethod
    def embed(self, text: str) -> Vector:
        """Embed a single text.

        Args:
            text: Text to embed

        Returns:
            Vector of exactly `dimension` floats

        Raises:
            ProviderError: If the embedding could not be produced
        """
        pass

    @property
    def model_name(self) -> str:
        return type(self).__name__


__all__ = ["EmbeddingProvider"]
