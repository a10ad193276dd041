"""OpenAI embedding provider (via langchain-openai)."""

from typing import Optional

from langchain_openai import OpenAIEmbeddings
from loguru import logger

from proverbs.shared.config import EMBEDDING_DIM
from proverbs.shared.exceptions import ConfigurationError, ProviderError, ValidationError
from proverbs.shared.vectors import Vector, validate_vector

from .base import EmbeddingProvider


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embeds text with an OpenAI embedding model.

    Retries for rate limits and transient API errors are delegated to the
    OpenAI client (`max_retries`); whatever still fails surfaces as
    ProviderError.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "text-embedding-3-small",
        dimension: int = EMBEDDING_DIM,
        timeout: float = 30.0,
        max_retries: int = 2,
    ) -> None:
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY environment variable is required")

        self.model = model
        self.dimension = dimension

        kwargs = {}
        # Only the v3 models accept an explicit output dimension
        if model.startswith("text-embedding-3"):
            kwargs["dimensions"] = dimension

        self._embeddings = OpenAIEmbeddings(
            model=model,
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            **kwargs,
        )

    @property
    def model_name(self) -> str:
        return self.model

    def embed(self, text: str) -> Vector:
        try:
            raw = self._embeddings.embed_query(text)
        except Exception as e:
            # Security: log error type only, the message may echo request data
            logger.warning(f"Embedding request failed: {type(e).__name__}")
            raise ProviderError(f"Embedding request failed: {type(e).__name__}") from e

        try:
            return validate_vector(raw, self.dimension)
        except ValidationError as e:
            raise ProviderError(f"Malformed embedding response: {e}") from e


__all__ = ["OpenAIEmbeddingProvider"]
