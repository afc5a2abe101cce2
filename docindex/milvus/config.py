# config.py - Indexer Configuration
# =============================================================================

from pathlib import Path
from dotenv import load_dotenv

from shared_config import config_from_env, get_config

env_path = Path.cwd() / ".env"
load_dotenv(env_path)

# Load from YAML config, fall back to environment variables and defaults
try:
    _config = get_config()
except FileNotFoundError:
    _config = config_from_env()

MILVUS_URI = _config.milvus.uri
COLLECTION_NAME = _config.milvus.collection_name
CONNECT_ATTEMPTS = _config.milvus.connect_attempts
DISTANCE_METRIC = _config.milvus.distance_metric
# Left unparsed; the chunker validates it
CHUNK_SIZE = _config.chunking.chunk_size
EMBEDDING_MODEL = _config.embedding.model
DENSE_DIM = _config.embedding.dim  # all-MiniLM-L6-v2
BATCH_WIDTH = _config.upsert.batch_width
