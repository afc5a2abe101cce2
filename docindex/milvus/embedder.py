# embedder.py - Dense Embedding Generation
# =============================================================================

from rich.console import Console

from .config import EMBEDDING_MODEL
from .errors import EmbeddingUnavailableError, InvariantViolation
from .models import Chunk

console = Console()


def load_embedding_function(model_name: str):
    """
    Loads a sentence-transformer model through pymilvus' model package.

    all-MiniLM-L6-v2 produces 384-dimensional vectors. The first call
    downloads the model.
    """
    from pymilvus.model.dense import SentenceTransformerEmbeddingFunction

    return SentenceTransformerEmbeddingFunction(model_name=model_name, device="cpu")


class EmbeddingBatchClient:
    """
    Produces one vector per chunk, in chunk order.

    Args:
        model_name: Sentence-transformer model id
        embedding_function: Object exposing encode_documents(texts) and dim.
            Loaded lazily from model_name when not given.
    """

    def __init__(self, model_name: str = None, embedding_function=None) -> None:
        self.model_name = model_name or EMBEDDING_MODEL
        self._ef = embedding_function

    @property
    def embedding_function(self):
        if self._ef is None:
            console.print(f"[dim]Loading embedding model: {self.model_name}[/dim]")
            try:
                self._ef = load_embedding_function(self.model_name)
            except Exception as e:
                raise EmbeddingUnavailableError(
                    f"Cannot load embedding model {self.model_name}: {e}",
                    {"model": self.model_name},
                ) from e
        return self._ef

    @property
    def dim(self) -> int:
        """Vector size of the loaded model."""
        try:
            return int(self.embedding_function.dim)
        except EmbeddingUnavailableError:
            raise
        except Exception as e:
            raise EmbeddingUnavailableError(
                f"Cannot read dimension of {self.model_name}: {e}",
                {"model": self.model_name},
            ) from e

    def embed(self, chunks: list[Chunk]) -> list[list[float]]:
        """
        Embeds chunk texts in a single batch call.

        Returns:
            One list of floats per chunk, same order as the input

        Raises:
            EmbeddingUnavailableError: If the model cannot be loaded or invoked
            InvariantViolation: If the engine returns vectors of different sizes
        """
        if not chunks:
            return []

        texts = [c.text for c in chunks]
        ef = self.embedding_function

        try:
            raw = ef.encode_documents(texts)
        except Exception as e:
            raise EmbeddingUnavailableError(
                f"Embedding call failed: {e}",
                {"model": self.model_name, "chunks": len(texts)},
            ) from e

        vectors = []
        for v in raw:
            # numpy arrays from the model, plain lists from tests
            if hasattr(v, "tolist"):
                v = v.tolist()
            vectors.append([float(x) for x in v])

        # Count mismatches are caught by the point builder
        dims = {len(v) for v in vectors}
        if len(dims) > 1:
            raise InvariantViolation(
                f"Embedding engine returned vectors of different sizes: {sorted(dims)}",
                {"dims": sorted(dims)},
            )

        return vectors
