# upserter.py - Batched Point Upload
# =============================================================================

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn

from .config import BATCH_WIDTH
from .errors import UpsertError
from .models import CollectionRef, Point

console = Console()


class Upserter:
    """
    Writes points in sequential batches, waiting for each acknowledgment
    before sending the next one.

    Args:
        store: Vector-store adapter (see store.MilvusStore)
        show_progress: Render a rich progress bar while uploading
    """

    def __init__(self, store, show_progress: bool = True) -> None:
        self.store = store
        self.show_progress = show_progress

    def upsert(
        self,
        collection: CollectionRef,
        points: list[Point],
        batch_width: int = None,
    ) -> int:
        """
        Uploads every point.

        Args:
            collection: Target collection
            points: Points to write
            batch_width: Maximum points per batch

        Returns:
            Number of points acknowledged

        Raises:
            ValueError: If batch_width is not positive
            UpsertError: On the first rejected batch. Nothing is retried and
                earlier batches stay written; `acknowledged` counts them.
        """
        width = BATCH_WIDTH if batch_width is None else batch_width
        if width < 1:
            raise ValueError(f"batch_width must be positive, got {width}")

        if not points:
            return 0

        acknowledged = 0
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            console=console,
            disable=not self.show_progress,
        ) as progress:
            task = progress.add_task("Uploading points...", total=len(points))

            for start in range(0, len(points), width):
                batch = points[start:start + width]
                acknowledged += self._upsert_batch(collection, batch, start, acknowledged)
                progress.update(task, advance=len(batch))

        try:
            self.store.flush(collection.name)
        except Exception as e:
            raise UpsertError(
                f"Flush of collection '{collection.name}' failed: {e}",
                acknowledged=acknowledged,
                details={"collection": collection.name},
            ) from e

        return acknowledged

    def _upsert_batch(
        self,
        collection: CollectionRef,
        batch: list[Point],
        start: int,
        acknowledged: int,
    ) -> int:
        details = {
            "collection": collection.name,
            "batch_start": start,
            "batch_size": len(batch),
        }

        try:
            count = self.store.upsert(collection.name, [p.to_row() for p in batch])
        except Exception as e:
            raise UpsertError(
                f"Batch starting at point {start} rejected: {e}",
                acknowledged=acknowledged,
                details=details,
            ) from e

        if count != len(batch):
            raise UpsertError(
                f"Batch starting at point {start} acknowledged {count} of {len(batch)} points",
                acknowledged=acknowledged,
                details=details,
            )

        return count


def upsert(store, collection: CollectionRef, points: list[Point], batch_width: int = None) -> int:
    """Function form of Upserter.upsert without a progress bar."""
    return Upserter(store, show_progress=False).upsert(collection, points, batch_width)
