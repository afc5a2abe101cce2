"""Unit tests for batched upserts."""

import pytest

from conftest import FakeStore
from docindex.milvus.errors import UpsertError
from docindex.milvus.models import CollectionRef, CollectionState, Chunk
from docindex.milvus.points import build
from docindex.milvus.upserter import Upserter, upsert

REF = CollectionRef(name="test", vector_size=4, state=CollectionState.CLEARED)


def _points(n: int):
    chunks = [Chunk(index=i, text=f"chunk {i}", token_count=2) for i in range(n)]
    return build("report.pdf", chunks, [[float(i)] * 4 for i in range(n)], vector_size=4)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore(collections={"test": []})


def test_all_points_acknowledged(store: FakeStore) -> None:
    acknowledged = upsert(store, REF, _points(5), batch_width=2)

    assert acknowledged == 5
    assert [c for c in store.calls if c[0] == "upsert"] == [
        ("upsert", "test", 2),
        ("upsert", "test", 2),
        ("upsert", "test", 1),
    ]
    assert store.calls[-1] == ("flush", "test")
    assert [r["chunk_number"] for r in store.rows("test")] == [0, 1, 2, 3, 4]


@pytest.mark.parametrize("width", [1, 3, 6, 100])
def test_final_state_independent_of_width(width: int) -> None:
    store = FakeStore(collections={"test": []})
    points = _points(7)

    assert upsert(store, REF, points, batch_width=width) == 7
    assert set(store.collections["test"]) == {p.id for p in points}


def test_third_of_four_batches_rejected() -> None:
    store = FakeStore(collections={"test": []}, fail_on_batch=3)

    with pytest.raises(UpsertError) as excinfo:
        upsert(store, REF, _points(4), batch_width=1)

    assert excinfo.value.acknowledged == 2
    assert excinfo.value.details["batch_start"] == 2
    # No fourth batch, no flush
    assert store.ops().count("upsert") == 3
    assert "flush" not in store.ops()
    # Earlier batches are not rolled back
    assert len(store.collections["test"]) == 2


def test_acknowledged_count_is_whole_batches() -> None:
    store = FakeStore(collections={"test": []}, fail_on_batch=2)

    with pytest.raises(UpsertError) as excinfo:
        upsert(store, REF, _points(7), batch_width=3)

    assert excinfo.value.acknowledged == 3


def test_short_acknowledgment_is_a_failure() -> None:
    store = FakeStore(collections={"test": []}, short_ack_on_batch=1)

    with pytest.raises(UpsertError, match="acknowledged 1 of 2 points") as excinfo:
        upsert(store, REF, _points(4), batch_width=2)

    assert excinfo.value.acknowledged == 0


def test_flush_failure_reports_acknowledged(store: FakeStore) -> None:
    class NoFlushStore(FakeStore):
        def flush(self, name):
            raise RuntimeError("flush timeout")

    with pytest.raises(UpsertError, match="Flush") as excinfo:
        upsert(NoFlushStore(collections={"test": []}), REF, _points(3), batch_width=2)

    assert excinfo.value.acknowledged == 3


def test_invalid_width(store: FakeStore) -> None:
    with pytest.raises(ValueError, match="batch_width must be positive"):
        upsert(store, REF, _points(2), batch_width=0)
    assert store.calls == []


def test_no_points_no_calls(store: FakeStore) -> None:
    assert Upserter(store, show_progress=False).upsert(REF, [], 6) == 0
    assert store.calls == []
