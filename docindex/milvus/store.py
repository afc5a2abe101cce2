# store.py - Milvus Vector Store Adapter
# =============================================================================
# The minimal set of vector-store operations the pipeline consumes:
# list / create / drop collections, upsert rows, flush.
# =============================================================================

import time

from rich.console import Console
from pymilvus import (
    connections,
    utility,
    FieldSchema,
    CollectionSchema,
    DataType,
    Collection,
)

from .config import MILVUS_URI, CONNECT_ATTEMPTS
from .errors import StoreUnavailableError
from .models import TEXT_MAX_BYTES, DistanceMetric

console = Console()

ID_MAX_LENGTH = 64
FILE_NAME_MAX_LENGTH = 512
TEXT_MAX_LENGTH = TEXT_MAX_BYTES


def build_schema(dim: int) -> CollectionSchema:
    """Schema for chunk points: string id, payload fields, dense vector."""
    fields = [
        FieldSchema(
            name="id",
            dtype=DataType.VARCHAR,
            is_primary=True,
            auto_id=False,
            max_length=ID_MAX_LENGTH
        ),
        FieldSchema(
            name="file_name",
            dtype=DataType.VARCHAR,
            max_length=FILE_NAME_MAX_LENGTH
        ),
        FieldSchema(
            name="text",
            dtype=DataType.VARCHAR,
            max_length=TEXT_MAX_LENGTH
        ),
        FieldSchema(
            name="chunk_number",
            dtype=DataType.INT64
        ),
        FieldSchema(
            name="vector",
            dtype=DataType.FLOAT_VECTOR,
            dim=dim
        ),
    ]

    return CollectionSchema(fields, description="Document chunks with dense embeddings")


class MilvusStore:
    """
    Thin wrapper around the pymilvus ORM API.

    Args:
        uri: Milvus endpoint
        connect_attempts: How many times connect() tries before giving up
        retry_delay: Seconds between connection attempts
        alias: pymilvus connection alias
    """

    def __init__(
        self,
        uri: str = None,
        connect_attempts: int = None,
        retry_delay: float = 1.0,
        alias: str = "default",
    ) -> None:
        self.uri = uri or MILVUS_URI
        self.connect_attempts = max(1, connect_attempts or CONNECT_ATTEMPTS)
        self.retry_delay = retry_delay
        self.alias = alias
        self._connected = False
        self._collections: dict[str, Collection] = {}

    def connect(self) -> None:
        """
        Connects and checks the server answers a collection listing.

        Raises:
            StoreUnavailableError: If every attempt fails
        """
        last_error = None

        for attempt in range(1, self.connect_attempts + 1):
            try:
                connections.connect(alias=self.alias, uri=self.uri)
                utility.list_collections(using=self.alias)
                self._connected = True
                console.print(f"[green]✓ Connected to Milvus at {self.uri}[/green]")
                return
            except Exception as e:
                last_error = e
                console.print(
                    f"[yellow]⚠ Milvus not reachable at {self.uri} "
                    f"(attempt {attempt}/{self.connect_attempts}): {e}[/yellow]"
                )
                if attempt < self.connect_attempts:
                    time.sleep(self.retry_delay)

        raise StoreUnavailableError(
            f"Cannot reach Milvus at {self.uri}",
            {"uri": self.uri, "attempts": self.connect_attempts},
        ) from last_error

    def _ensure_connected(self) -> None:
        if not self._connected:
            self.connect()

    def _get_collection(self, name: str) -> Collection:
        col = self._collections.get(name)
        if col is None:
            col = Collection(name, using=self.alias)
            col.load()
            self._collections[name] = col
        return col

    def list_collections(self) -> list[str]:
        self._ensure_connected()
        return list(utility.list_collections(using=self.alias))

    def create_collection(self, name: str, dim: int, metric: DistanceMetric) -> None:
        """Creates the collection, its vector index, and loads it."""
        self._ensure_connected()
        console.print(f"[cyan]Creating collection: {name} (dim={dim}, metric={metric.value})[/cyan]")

        col = Collection(name, build_schema(dim), using=self.alias)
        col.create_index("vector", {"index_type": "AUTOINDEX", "metric_type": metric.value})
        col.load()
        self._collections[name] = col

    def drop_collection(self, name: str) -> None:
        self._ensure_connected()
        utility.drop_collection(name, using=self.alias)
        self._collections.pop(name, None)

    def upsert(self, name: str, rows: list[dict]) -> int:
        """
        Upserts rows and blocks until Milvus acknowledges them.

        Returns:
            Number of rows Milvus reports as upserted
        """
        self._ensure_connected()
        result = self._get_collection(name).upsert(rows)
        return result.upsert_count

    def flush(self, name: str) -> None:
        self._ensure_connected()
        self._get_collection(name).flush()
