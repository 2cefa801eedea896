"""Retrieval package.

Architectural role:
    Provides the in-memory vector store and retrieval-augmented answering used
    by the provider gateway.

Scope:
    - `vector_store`: document storage and cosine similarity search (FAISS).
    - `rag`: context assembly and the grounded chat call.
"""
