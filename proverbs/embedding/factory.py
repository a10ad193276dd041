"""Builds the configured EmbeddingProvider."""

from loguru import logger

from proverbs.shared.config import AppConfig

from .base import EmbeddingProvider
from .fake import FakeEmbeddingProvider
from .openai import OpenAIEmbeddingProvider


class EmbeddingProviderFactory:
    """Selects an embedding provider from `config.embedding_provider`.

    Example:
        >>> provider = EmbeddingProviderFactory.create(config)
        >>> vector = provider.embed("Iron sharpeneth iron")
    """

    @staticmethod
    def create(config: AppConfig) -> EmbeddingProvider:
        if config.embedding_provider == "fake":
            logger.warning("Using fake embeddings (deterministic, not semantic)")
            return FakeEmbeddingProvider(dimension=config.embedding_dim)

        logger.info(f"Embedding provider: openai ({config.embedding_model})")
        return OpenAIEmbeddingProvider(
            api_key=config.openai_api_key,
            model=config.embedding_model,
            dimension=config.embedding_dim,
            timeout=config.embedding_timeout,
            max_retries=config.embedding_max_retries,
        )


__all__ = ["EmbeddingProviderFactory"]
