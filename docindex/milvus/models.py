# models.py - Pydantic Models for the Indexer
# ============================================================================

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Milvus VARCHAR max_length is counted in bytes
TEXT_MAX_BYTES = 65535


class DistanceMetric(str, Enum):
    """Similarity functions supported for a collection's vectors."""
    COSINE = "COSINE"
    IP = "IP"
    L2 = "L2"

    @classmethod
    def parse(cls, value: "str | DistanceMetric") -> "DistanceMetric":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unsupported distance metric: {value!r}") from None


class CollectionState(str, Enum):
    """
    Existence state of the target collection during one run.

    UNKNOWN -> ABSENT | PRESENT, then PRESENT -> KEPT | CLEARED and
    ABSENT -> CLEARED (freshly created).
    """
    UNKNOWN = "unknown"
    ABSENT = "absent"
    PRESENT = "present"
    KEPT = "kept"
    CLEARED = "cleared"


class Document(BaseModel):
    """A source document after text extraction."""
    model_config = ConfigDict(frozen=True)

    path: str
    raw_text: str

    @property
    def file_name(self) -> str:
        return file_name_for(self.path)


class Chunk(BaseModel):
    """A token-bounded slice of document text."""
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0, description="Position of the chunk in the document (0-based)")
    text: str = Field(description="Whitespace-trimmed chunk text")
    token_count: int = Field(ge=0, description="Token count reported by the tokenizer")


class PointPayload(BaseModel):
    """
    Payload stored next to each vector.

    These are the scalar fields of the Milvus collection and can be used
    to filter searches.
    """
    file_name: str = Field(description="Final path segment of the source document")
    text: str = Field(description="Chunk text")
    chunk_number: int = Field(description="Chunk index within the document")


class Point(BaseModel):
    """A stored unit of the vector index."""
    id: str
    vector: list[float]
    payload: PointPayload

    def to_row(self) -> dict:
        """Flattens the point into a Milvus row."""
        return {"id": self.id, "vector": self.vector, **self.payload.model_dump()}


class CollectionRef(BaseModel):
    """Reference to a provisioned collection."""
    name: str
    vector_size: int = Field(gt=0)
    distance_metric: DistanceMetric = DistanceMetric.COSINE
    state: CollectionState = CollectionState.UNKNOWN


class IngestionReport(BaseModel):
    """
    Progress of one indexing run.

    Returned on success, and attached to the raised error on failure.
    """
    file_name: str
    collection_name: str
    chunk_size: int | None = None
    chunks_created: int = 0
    vectors_produced: int = 0
    points_acknowledged: int = 0
    collection_state: CollectionState = CollectionState.UNKNOWN


def file_name_for(path: str) -> str:
    """Returns the final path segment, or "unknown" when there is none."""
    return Path(str(path)).name or "unknown"
