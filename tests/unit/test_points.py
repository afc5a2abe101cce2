"""Unit tests for point construction."""

import uuid

import pytest

from docindex.milvus.errors import InvariantViolation
from docindex.milvus.models import Chunk
from docindex.milvus.points import IdStrategy, build, deterministic_point_id


def _chunks(n: int) -> list[Chunk]:
    return [Chunk(index=i, text=f"chunk {i}", token_count=2) for i in range(n)]


def _vectors(n: int, dim: int = 4) -> list[list[float]]:
    return [[float(i)] * dim for i in range(n)]


def test_points_follow_chunk_order() -> None:
    points = build("/data/docs/report.pdf", _chunks(5), _vectors(5), vector_size=4)

    assert [p.payload.chunk_number for p in points] == [0, 1, 2, 3, 4]
    assert [p.vector[0] for p in points] == [0.0, 1.0, 2.0, 3.0, 4.0]
    assert all(len(p.vector) == 4 for p in points)


def test_payload_shape() -> None:
    point = build("/data/docs/report.pdf", _chunks(1), _vectors(1))[0]

    assert point.payload.model_dump() == {
        "file_name": "report.pdf",
        "text": "chunk 0",
        "chunk_number": 0,
    }
    assert point.to_row() == {
        "id": point.id,
        "vector": [0.0, 0.0, 0.0, 0.0],
        "file_name": "report.pdf",
        "text": "chunk 0",
        "chunk_number": 0,
    }


def test_random_ids_are_unique_across_runs() -> None:
    first = build("report.pdf", _chunks(3), _vectors(3))
    second = build("report.pdf", _chunks(3), _vectors(3))

    ids = [p.id for p in first + second]
    assert len(set(ids)) == 6
    assert all(uuid.UUID(i).version == 4 for i in ids)


def test_deterministic_ids_repeat_across_runs() -> None:
    first = build("a/report.pdf", _chunks(3), _vectors(3), id_strategy="deterministic")
    second = build("b/report.pdf", _chunks(3), _vectors(3), id_strategy=IdStrategy.DETERMINISTIC)

    assert [p.id for p in first] == [p.id for p in second]
    assert len({p.id for p in first}) == 3


def test_deterministic_id_depends_on_content() -> None:
    assert deterministic_point_id("r.pdf", 0, "a") != deterministic_point_id("r.pdf", 0, "b")
    assert deterministic_point_id("r.pdf", 0, "a") != deterministic_point_id("r.pdf", 1, "a")
    assert deterministic_point_id("r.pdf", 0, "a") != deterministic_point_id("s.pdf", 0, "a")


def test_four_vectors_for_five_chunks_raises() -> None:
    with pytest.raises(InvariantViolation, match="4 vectors for 5 chunks"):
        build("report.pdf", _chunks(5), _vectors(4))


def test_wrong_vector_size_raises() -> None:
    with pytest.raises(InvariantViolation, match="collection expects 384"):
        build("report.pdf", _chunks(2), _vectors(2, dim=768), vector_size=384)


def test_no_chunks_no_points() -> None:
    assert build("report.pdf", [], []) == []


def test_unknown_id_strategy() -> None:
    with pytest.raises(ValueError, match="Unsupported id strategy"):
        build("report.pdf", _chunks(1), _vectors(1), id_strategy="sequential")
