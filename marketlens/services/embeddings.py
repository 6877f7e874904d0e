from __future__ import annotations

from loguru import logger

from marketlens.config import settings
from marketlens.errors import EmbeddingError
from marketlens.llm_client import client as llm_client, get_embedding_model


class EmbeddingService:
    """Remote embedding service; a request succeeds for every text or fails as a whole."""

    def __init__(self, model_name: str | None = None, batch_size: int | None = None):
        self.model_name = model_name or get_embedding_model()
        self.batch_size = max(int(batch_size or settings.embedding_batch_size), 1)
        self.client = None

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        logger.info(f"Generating embeddings for {len(texts)} texts with {self.model_name}")

        active_client = self.client or llm_client()
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start:start + self.batch_size]
            try:
                batch_vectors = await active_client.embeddings.create(
                    model=self.model_name, texts=batch
                )
            except Exception as e:
                logger.error(f"Failed to generate embeddings: {e}")
                raise EmbeddingError(str(e) or "Embedding request failed") from e
            if len(batch_vectors) != len(batch):
                raise EmbeddingError(
                    f"Embedding response returned {len(batch_vectors)} vectors for {len(batch)} texts"
                )
            vectors.extend(batch_vectors)
        return vectors

    async def embed_text(self, text: str) -> list[float]:
        vectors = await self.embed_texts([text])
        return vectors[0]


def document_text(title: str, content: str) -> str:
    """Text embedded and keyword-scored for one search result."""
    return f"{title}. {content}"
