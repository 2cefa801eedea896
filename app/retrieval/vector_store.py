"""In-memory vector store with brute-force cosine similarity search.

Architectural role:
    Holds submitted documents together with provider-computed embeddings and
    answers similarity queries for the vector-search and RAG endpoints.

Ranking and scoring:
    Vectors are L2-normalized before insertion into a `faiss.IndexFlatIP`, so
    the inner product returned by FAISS is the cosine similarity. Results are
    ordered by descending score; an optional threshold drops hits scoring
    below it. `threshold=None` accepts every hit.

Identity:
    Documents are keyed by id. Re-adding an existing id replaces the stored
    text, metadata and vector.

FAISS interaction:
    The flat index is rebuilt from the retained vector matrix after each add.
    Rebuild cost is linear in the number of stored documents.

Persistence:
    None. The store lives for the process lifetime.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

import faiss
import numpy as np

from app.core.types import SearchResult
from app.llm.base import EmbeddingModel


logger = logging.getLogger(__name__)


@dataclass
class Document:
    id: str
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


def _normalized(vectors) -> np.ndarray:
    """Convert provider vectors into a normalized float32 matrix."""
    matrix = np.array(vectors, dtype="float32")
    if matrix.ndim == 1:
        matrix = matrix.reshape(1, -1)
    faiss.normalize_L2(matrix)
    return matrix


class InMemoryVectorStore:
    """Vector store backed by the embedding capability and a flat FAISS index."""

    def __init__(self, embedding_model: EmbeddingModel):
        self._embedding_model = embedding_model
        self._documents: list[Document] = []
        self._vectors: np.ndarray | None = None
        self._index = None
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    def add(self, documents: list[Document]) -> None:
        """Embed and store documents; ids already present (or repeated in the batch) are replaced.

        Embedding happens before the lock is taken, so a provider failure
        leaves the store unchanged.
        """
        if not documents:
            return

        # Last entry wins for ids repeated within one batch.
        documents = list({doc.id: doc for doc in documents}.values())

        vectors = _normalized(self._embedding_model.embed([doc.text for doc in documents]))

        with self._lock:
            new_ids = {doc.id for doc in documents}
            keep = [i for i, doc in enumerate(self._documents) if doc.id not in new_ids]

            retained_docs = [self._documents[i] for i in keep]
            if self._vectors is not None and keep:
                retained_vectors = self._vectors[keep]
                matrix = np.vstack([retained_vectors, vectors])
            else:
                matrix = vectors

            index = faiss.IndexFlatIP(matrix.shape[1])
            index.add(matrix)

            self._documents = retained_docs + documents
            self._vectors = matrix
            self._index = index

        logger.info("Indexed %s documents (store size %s)", len(documents), len(self._documents))

    def similarity_search(self, query: str, top_k: int = 4, threshold: float | None = None) -> list[SearchResult]:
        """Return up to `top_k` documents ordered by cosine similarity.

        Args:
            query: Query text, embedded with the same capability as documents.
            top_k: Maximum number of hits.
            threshold: Minimum score; `None` accepts all hits.

        Edge cases:
            - Empty store returns `[]` without calling the provider.
        """
        with self._lock:
            if not self._documents:
                return []

        query_vector = _normalized(self._embedding_model.embed([query]))

        with self._lock:
            if self._index is None or not self._documents:
                return []

            k = min(max(top_k, 1), len(self._documents))
            scores, indices = self._index.search(query_vector, k)
            documents = list(self._documents)

        results = []
        for rank, idx in enumerate(indices[0]):
            if idx < 0 or idx >= len(documents):
                continue

            score = float(scores[0][rank])
            if threshold is not None and score < threshold:
                continue

            doc = documents[idx]
            results.append(SearchResult(id=doc.id, text=doc.text, score=score, metadata=dict(doc.metadata)))

        return results
