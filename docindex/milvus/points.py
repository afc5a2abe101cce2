# points.py - Point Construction
# =============================================================================

import hashlib
import uuid
from enum import Enum

from .errors import InvariantViolation
from .models import Chunk, Point, PointPayload, file_name_for

# Namespace for deterministic point ids
POINT_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "docindex/milvus/points")


class IdStrategy(str, Enum):
    """
    RANDOM gives every point a fresh uuid4, so re-ingesting a document
    adds a second copy of its points. DETERMINISTIC derives the id from
    file name, chunk number and content, so re-runs overwrite by id.
    """
    RANDOM = "random"
    DETERMINISTIC = "deterministic"

    @classmethod
    def parse(cls, value: "str | IdStrategy") -> "IdStrategy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unsupported id strategy: {value!r}") from None


def deterministic_point_id(file_name: str, chunk_number: int, text: str) -> str:
    content_hash = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return str(uuid.uuid5(POINT_NAMESPACE, f"{file_name}:{chunk_number}:{content_hash}"))


def build(
    document_name: str,
    chunks: list[Chunk],
    vectors: list[list[float]],
    vector_size: int | None = None,
    id_strategy: IdStrategy | str = IdStrategy.RANDOM,
) -> list[Point]:
    """
    Pairs chunks with their vectors into points.

    Args:
        document_name: Source path or name; only its final segment is stored
        chunks: Chunks in document order
        vectors: One vector per chunk, same order
        vector_size: Expected vector length (the collection's dimension)
        id_strategy: How point ids are generated

    Returns:
        Points in chunk order, payload.chunk_number == chunk.index

    Raises:
        InvariantViolation: If counts differ or a vector has the wrong size
    """
    if len(chunks) != len(vectors):
        raise InvariantViolation(
            f"Got {len(vectors)} vectors for {len(chunks)} chunks",
            {"chunks": len(chunks), "vectors": len(vectors)},
        )

    strategy = IdStrategy.parse(id_strategy)
    file_name = file_name_for(document_name)
    points = []

    for chunk, vector in zip(chunks, vectors):
        if vector_size is not None and len(vector) != vector_size:
            raise InvariantViolation(
                f"Vector for chunk {chunk.index} has {len(vector)} dimensions, collection expects {vector_size}",
                {"chunk_number": chunk.index, "dims": len(vector), "expected": vector_size},
            )

        if strategy is IdStrategy.DETERMINISTIC:
            point_id = deterministic_point_id(file_name, chunk.index, chunk.text)
        else:
            point_id = str(uuid.uuid4())

        points.append(Point(
            id=point_id,
            vector=list(vector),
            payload=PointPayload(
                file_name=file_name,
                text=chunk.text,
                chunk_number=chunk.index,
            ),
        ))

    return points
