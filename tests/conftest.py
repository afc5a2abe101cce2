"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from docindex.milvus.models import DistanceMetric


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ──────────────────────────────────────────────────────────────────────
# Fakes for the external collaborators
# ──────────────────────────────────────────────────────────────────────


def word_counter(text: str) -> int:
    """Whitespace tokenizer: one token per word."""
    return len(text.split())


class FakeStore:
    """In-memory stand-in for ``MilvusStore``.

    ``collections`` maps a collection name to ``{point_id: row}``;
    ``calls`` records every operation in order.
    """

    def __init__(
        self,
        collections: dict[str, list[dict]] | None = None,
        fail_on_batch: int | None = None,
        short_ack_on_batch: int | None = None,
    ) -> None:
        self.collections: dict[str, dict[str, dict]] = {}
        self.schemas: dict[str, tuple[int, DistanceMetric]] = {}
        for name, rows in (collections or {}).items():
            self.collections[name] = {row["id"]: row for row in rows}
            self.schemas[name] = (384, DistanceMetric.COSINE)
        self.calls: list[tuple] = []
        self.fail_on_batch = fail_on_batch
        self.short_ack_on_batch = short_ack_on_batch
        self.batches = 0

    def list_collections(self) -> list[str]:
        self.calls.append(("list",))
        return list(self.collections)

    def create_collection(self, name: str, dim: int, metric: DistanceMetric) -> None:
        self.calls.append(("create", name, dim, metric))
        self.collections[name] = {}
        self.schemas[name] = (dim, metric)

    def drop_collection(self, name: str) -> None:
        self.calls.append(("drop", name))
        self.collections.pop(name)
        self.schemas.pop(name)

    def upsert(self, name: str, rows: list[dict]) -> int:
        self.batches += 1
        self.calls.append(("upsert", name, len(rows)))
        if self.batches == self.fail_on_batch:
            raise RuntimeError("batch rejected")
        if self.batches == self.short_ack_on_batch:
            return len(rows) - 1
        for row in rows:
            self.collections[name][row["id"]] = row
        return len(rows)

    def flush(self, name: str) -> None:
        self.calls.append(("flush", name))

    def ops(self) -> list[str]:
        return [c[0] for c in self.calls]

    def rows(self, name: str) -> list[dict]:
        return sorted(self.collections[name].values(), key=lambda r: r["chunk_number"])


class FakeEmbeddingFunction:
    """Mimics pymilvus' dense embedding functions (``encode_documents`` + ``dim``)."""

    def __init__(self, dim: int = 384, drop_last: bool = False) -> None:
        self.dim = dim
        self.drop_last = drop_last
        self.calls: list[list[str]] = []

    def encode_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        vectors = [[float(len(t))] + [0.0] * (self.dim - 1) for t in texts]
        if self.drop_last:
            vectors = vectors[:-1]
        return vectors


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_ef() -> FakeEmbeddingFunction:
    return FakeEmbeddingFunction()


@pytest.fixture
def thousand_words() -> str:
    return " ".join(f"w{i}" for i in range(1000))
