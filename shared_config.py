# shared_config.py - Shared Configuration Loader
# =============================================================================
# This module loads the YAML configuration and makes it available to the
# indexing pipeline and the command line entry point.
# =============================================================================

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class MilvusConfig:
    uri: str = "http://127.0.0.1:19530"
    collection_name: str = "test"
    connect_attempts: int = 1
    distance_metric: str = "cosine"


@dataclass
class ChunkingConfig:
    # Kept raw: validated by docindex.milvus.chunker.resolve_chunk_size
    chunk_size: object = 200
    lenient_chunk_size: bool = False


@dataclass
class EmbeddingConfig:
    model: str = "sentence-transformers/all-MiniLM-L6-v2"
    dim: int = 384


@dataclass
class UpsertConfig:
    batch_width: int = 6
    id_strategy: str = "random"


@dataclass
class DocumentConfig:
    path: str

    @property
    def filename(self) -> str:
        return Path(self.path).name


@dataclass
class PipelineConfig:
    conflict_policy: str = "keep"
    allow_auto_provision: bool = True
    debug: bool = False


@dataclass
class Config:
    """Main configuration class that holds all settings."""
    milvus: MilvusConfig = field(default_factory=MilvusConfig)
    chunking: ChunkingConfig = field(default_factory=ChunkingConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    upsert: UpsertConfig = field(default_factory=UpsertConfig)
    documents: list[DocumentConfig] = field(default_factory=list)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)


def find_config_path(config_path: Optional[str] = None) -> Optional[str]:
    """
    Resolves which config.yaml to use.

    Args:
        config_path: Explicit path. If None, searches in:
            1. CONFIG_PATH environment variable
            2. ./config.yaml
            3. ../config.yaml
            4. ../../config.yaml

    Returns:
        Path of an existing config file, or None
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH")

    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("../config.yaml"),
            Path("../../config.yaml"),
            Path(__file__).parent / "config.yaml",
        ]

        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    if config_path is None or not Path(config_path).exists():
        return None
    return config_path


def parse_config(data: Optional[dict]) -> Config:
    """
    Builds a Config from an already-parsed YAML mapping.

    Missing sections and keys fall back to the dataclass defaults.
    """
    data = data or {}

    milvus_data = data.get("milvus") or {}
    milvus = MilvusConfig(
        uri=milvus_data.get("uri", "http://127.0.0.1:19530"),
        collection_name=milvus_data.get("collection_name", "test"),
        connect_attempts=int(milvus_data.get("connect_attempts", 1)),
        distance_metric=milvus_data.get("distance_metric", "cosine"),
    )

    chunking_data = data.get("chunking") or {}
    chunking = ChunkingConfig(
        chunk_size=chunking_data.get("chunk_size", 200),
        lenient_chunk_size=bool(chunking_data.get("lenient_chunk_size", False)),
    )

    embedding_data = data.get("embedding") or {}
    embedding = EmbeddingConfig(
        model=embedding_data.get("model", "sentence-transformers/all-MiniLM-L6-v2"),
        dim=int(embedding_data.get("dim", 384)),
    )

    upsert_data = data.get("upsert") or {}
    upsert = UpsertConfig(
        batch_width=int(upsert_data.get("batch_width", 6)),
        id_strategy=upsert_data.get("id_strategy", "random"),
    )

    # Documents may be given as plain paths or as {"path": ...} mappings
    documents = []
    for doc in data.get("documents") or []:
        if isinstance(doc, str):
            documents.append(DocumentConfig(path=doc))
        else:
            documents.append(DocumentConfig(path=doc["path"]))

    pipeline_data = data.get("pipeline") or {}
    pipeline = PipelineConfig(
        conflict_policy=pipeline_data.get("conflict_policy", "keep"),
        allow_auto_provision=bool(pipeline_data.get("allow_auto_provision", True)),
        debug=bool(pipeline_data.get("debug", False)),
    )

    return Config(
        milvus=milvus,
        chunking=chunking,
        embedding=embedding,
        upsert=upsert,
        documents=documents,
        pipeline=pipeline,
    )


# Environment variable -> (section, key), used when there is no config.yaml
ENV_SETTINGS = {
    "MILVUS_URI": ("milvus", "uri"),
    "COLLECTION_NAME": ("milvus", "collection_name"),
    "CONNECT_ATTEMPTS": ("milvus", "connect_attempts"),
    "DISTANCE_METRIC": ("milvus", "distance_metric"),
    "CHUNK_SIZE": ("chunking", "chunk_size"),
    "EMBEDDING_MODEL": ("embedding", "model"),
    "DENSE_DIM": ("embedding", "dim"),
    "BATCH_WIDTH": ("upsert", "batch_width"),
    "ID_STRATEGY": ("upsert", "id_strategy"),
    "CONFLICT_POLICY": ("pipeline", "conflict_policy"),
}


def config_from_env() -> Config:
    """Builds a Config from environment variables; unset ones keep their defaults."""
    data: dict = {}
    for env_name, (section, key) in ENV_SETTINGS.items():
        value = os.environ.get(env_name)
        if value is not None:
            data.setdefault(section, {})[key] = value
    return parse_config(data)


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Loads configuration from YAML file.

    Args:
        config_path: Path to config.yaml. If None, see find_config_path.

    Returns:
        Config object with all settings

    Raises:
        FileNotFoundError: If no config file can be found
    """
    resolved = find_config_path(config_path)
    if resolved is None:
        raise FileNotFoundError(
            "config.yaml not found. Create one or set CONFIG_PATH environment variable."
        )

    with open(resolved, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    return parse_config(data)


# Global config instance (lazy loaded)
_config: Optional[Config] = None


def get_config(config_path: Optional[str] = None) -> Config:
    """
    Gets the global config instance, loading it if necessary.

    Args:
        config_path: Path to config.yaml (only used on first call)

    Returns:
        Config object
    """
    global _config
    if _config is None:
        _config = load_config(config_path)
    return _config


def reload_config(config_path: Optional[str] = None) -> Config:
    """
    Forces a reload of the configuration.

    Args:
        config_path: Path to config.yaml

    Returns:
        New Config object
    """
    global _config
    _config = load_config(config_path)
    return _config
