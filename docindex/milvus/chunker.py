# chunker.py - Token-Bounded Text Chunking
# =============================================================================

from functools import lru_cache
from typing import Callable, Optional

from langchain_text_splitters import RecursiveCharacterTextSplitter
from rich.console import Console

from .errors import ChunkConfigError
from .models import TEXT_MAX_BYTES, Chunk

console = Console()

DEFAULT_CHUNK_SIZE = 200
# Used instead of DEFAULT_CHUNK_SIZE when a non-numeric size is tolerated
FALLBACK_CHUNK_SIZE = 500
TIKTOKEN_ENCODING = "cl100k_base"
SEPARATORS = ["\n\n", "\n", ". ", " ", ""]

TokenCounter = Callable[[str], int]


@lru_cache(maxsize=None)
def tiktoken_counter(encoding_name: str = TIKTOKEN_ENCODING) -> TokenCounter:
    """Returns a token counter backed by a tiktoken encoding."""
    import tiktoken

    encoding = tiktoken.get_encoding(encoding_name)

    def count(text: str) -> int:
        return len(encoding.encode(text, disallowed_special=()))

    return count


def resolve_chunk_size(value: object = None, lenient: bool = False) -> int:
    """
    Turns a caller-supplied chunk size into a token budget.

    The budget is in tokens, while the stored text field is limited to
    TEXT_MAX_BYTES bytes of UTF-8. Very large budgets (roughly 15k tokens
    and up) can produce chunks over that limit; Chunker.chunk rejects
    them before anything is embedded.

    Args:
        value: None, an int, or a numeric string
        lenient: If True, a non-numeric value falls back to
            FALLBACK_CHUNK_SIZE instead of failing

    Returns:
        Positive token budget

    Raises:
        ChunkConfigError: If the value is not a positive integer
    """
    if value is None:
        return DEFAULT_CHUNK_SIZE

    size = None
    if isinstance(value, int) and not isinstance(value, bool):
        size = value
    elif isinstance(value, float) and value.is_integer():
        size = int(value)
    elif isinstance(value, str):
        try:
            size = int(value.strip())
        except ValueError:
            size = None

    if size is None:
        if lenient:
            console.print(
                f"[yellow]⚠ Invalid chunk size {value!r}, using {FALLBACK_CHUNK_SIZE}[/yellow]"
            )
            return FALLBACK_CHUNK_SIZE
        raise ChunkConfigError(f"Chunk size must be an integer, got {value!r}", {"chunk_size": value})

    if size < 1:
        raise ChunkConfigError(f"Chunk size must be positive, got {size}", {"chunk_size": size})

    return size


class Chunker:
    """
    Splits text into consecutive, whitespace-trimmed chunks of at most
    `budget` tokens.

    The tokenizer is only a length oracle. Splitting is greedy and prefers
    paragraph, line, sentence and word boundaries before cutting inside a
    word.
    """

    def __init__(self, budget: int, token_counter: Optional[TokenCounter] = None) -> None:
        if isinstance(budget, bool) or not isinstance(budget, int) or budget < 1:
            raise ChunkConfigError(f"Chunk budget must be a positive integer, got {budget!r}", {"budget": budget})
        self.budget = budget
        self._token_counter = token_counter

    @property
    def token_counter(self) -> TokenCounter:
        if self._token_counter is None:
            self._token_counter = tiktoken_counter()
        return self._token_counter

    def chunk(self, text: str) -> list[Chunk]:
        if not text or not text.strip():
            return []

        count = self.token_counter
        splitter = RecursiveCharacterTextSplitter(
            chunk_size=self.budget,
            chunk_overlap=0,
            separators=SEPARATORS,
            keep_separator="end",
            strip_whitespace=True,
            length_function=count,
        )

        pieces: list[str] = []
        for segment in splitter.split_text(text):
            # Pieces the splitter could not merge come back untrimmed
            segment = segment.strip()
            if not segment:
                continue
            # Token counts are not additive across joins, so re-check
            if count(segment) <= self.budget:
                pieces.append(segment)
            else:
                pieces.extend(self._hard_split(segment))

        for i, piece in enumerate(pieces):
            size = len(piece.encode("utf-8"))
            if size > TEXT_MAX_BYTES:
                raise ChunkConfigError(
                    f"Chunk {i} is {size} bytes, the text field holds at most {TEXT_MAX_BYTES}; "
                    f"use a smaller chunk budget than {self.budget}",
                    {"budget": self.budget, "chunk_number": i, "bytes": size},
                )

        return [
            Chunk(index=i, text=piece, token_count=count(piece))
            for i, piece in enumerate(pieces)
        ]

    def _hard_split(self, segment: str) -> list[str]:
        """Greedy character-level cut for a segment still over budget."""
        count = self.token_counter
        pieces = []
        current = ""

        for char in segment:
            if count(char) > self.budget:
                raise ChunkConfigError(
                    f"Chunk budget {self.budget} is smaller than a single character ({char!r})",
                    {"budget": self.budget, "tokens": count(char)},
                )
            candidate = current + char
            if current and count(candidate) > self.budget:
                pieces.append(current)
                current = char
            else:
                current = candidate

        if current:
            pieces.append(current)

        return [p.strip() for p in pieces if p.strip()]


def chunk(text: str, budget: int, token_counter: Optional[TokenCounter] = None) -> list[Chunk]:
    """Shortcut for Chunker(budget, token_counter).chunk(text)."""
    return Chunker(budget, token_counter=token_counter).chunk(text)
