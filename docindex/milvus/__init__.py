# milvus package
from .config import MILVUS_URI, COLLECTION_NAME, CHUNK_SIZE, DENSE_DIM, BATCH_WIDTH
from .errors import (
    IngestError,
    ExtractionError,
    ChunkConfigError,
    StoreUnavailableError,
    CollectionProvisionError,
    EmbeddingUnavailableError,
    InvariantViolation,
    UpsertError,
)
from .models import (
    Chunk,
    CollectionRef,
    CollectionState,
    DistanceMetric,
    Document,
    IngestionReport,
    Point,
    PointPayload,
)
from .extractor import extract_document
from .chunker import Chunker, chunk, resolve_chunk_size, DEFAULT_CHUNK_SIZE, FALLBACK_CHUNK_SIZE
from .collection import CollectionManager, ConflictPolicy, ensure
from .embedder import EmbeddingBatchClient
from .points import IdStrategy, build
from .upserter import Upserter, upsert
from .store import MilvusStore
from .indexer import index_document, describe_failure

__all__ = [
    "MILVUS_URI",
    "COLLECTION_NAME",
    "CHUNK_SIZE",
    "DENSE_DIM",
    "BATCH_WIDTH",
    "IngestError",
    "ExtractionError",
    "ChunkConfigError",
    "StoreUnavailableError",
    "CollectionProvisionError",
    "EmbeddingUnavailableError",
    "InvariantViolation",
    "UpsertError",
    "Chunk",
    "CollectionRef",
    "CollectionState",
    "DistanceMetric",
    "Document",
    "IngestionReport",
    "Point",
    "PointPayload",
    "extract_document",
    "Chunker",
    "chunk",
    "resolve_chunk_size",
    "DEFAULT_CHUNK_SIZE",
    "FALLBACK_CHUNK_SIZE",
    "CollectionManager",
    "ConflictPolicy",
    "ensure",
    "EmbeddingBatchClient",
    "IdStrategy",
    "build",
    "Upserter",
    "upsert",
    "MilvusStore",
    "index_document",
    "describe_failure",
]
