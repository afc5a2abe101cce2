# indexer.py - Main Indexing Logic
# ==============================================================================
# extract -> chunk -> provision collection -> embed -> build points -> upsert
#
# Every stage consumes the full output of the previous one. The first
# IngestError aborts the run; it leaves tagged with the failing stage and
# the progress reached so far.
# ==============================================================================

from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel

from .config import COLLECTION_NAME, CHUNK_SIZE, DENSE_DIM, DISTANCE_METRIC, BATCH_WIDTH
from .models import IngestionReport, file_name_for
from .errors import IngestError, InvariantViolation
from .extractor import extract_document
from .chunker import Chunker, resolve_chunk_size
from .collection import CollectionManager, ConflictPolicy
from .embedder import EmbeddingBatchClient
from .points import IdStrategy, build
from .upserter import Upserter

console = Console()

STAGES = ("extract", "chunk", "collection", "embed", "build", "upsert")


@contextmanager
def stage(name: str, report: IngestionReport):
    """Tags any IngestError raised inside with the stage and a progress snapshot."""
    try:
        yield
    except IngestError as e:
        e.stage = name
        e.report = report.model_copy()
        raise


def index_document(
    path: str,
    collection_name: str = None,
    chunk_size=None,
    *,
    lenient_chunk_size: bool = False,
    store=None,
    embedder: EmbeddingBatchClient = None,
    token_counter=None,
    vector_size: int = None,
    distance_metric: str = None,
    conflict_policy: ConflictPolicy | str = ConflictPolicy.KEEP,
    allow_auto_provision: bool = True,
    batch_width: int = None,
    id_strategy: IdStrategy | str = IdStrategy.RANDOM,
    debug: bool = False,
    show_progress: bool = True,
) -> IngestionReport:
    """
    Processes a document and indexes its chunks in a Milvus collection.

    Args:
        path: Path to the PDF (or .txt/.md) file
        collection_name: Target collection
        chunk_size: Token budget per chunk; None uses the configured CHUNK_SIZE
        lenient_chunk_size: Tolerate a non-numeric chunk_size
        store: Vector-store adapter; a MilvusStore is created when None
        embedder: Embedding client; the configured model when None
        token_counter: Tokenizer length oracle; tiktoken when None
        vector_size: Collection dimension; must match the embedding model
        distance_metric: Collection similarity function
        conflict_policy: KEEP or CLEAR an existing collection
        allow_auto_provision: Create the collection when absent
        batch_width: Points per upsert batch
        id_strategy: RANDOM or DETERMINISTIC point ids
        debug: Print extracted text, chunks and embeddings
        show_progress: Render progress bars

    Returns:
        IngestionReport with final counts

    Raises:
        ValueError: If collection_name is empty
        IngestError: The first fatal error, with `stage` and `report` set
    """
    col_name = COLLECTION_NAME if collection_name is None else collection_name
    if not col_name:
        raise ValueError("Collection name cannot be empty")

    dim = vector_size or DENSE_DIM
    metric = distance_metric or DISTANCE_METRIC
    width = BATCH_WIDTH if batch_width is None else batch_width
    file_name = file_name_for(path)

    report = IngestionReport(file_name=file_name, collection_name=col_name)

    console.print(Panel.fit(
        f"[bold]Indexing:[/bold] {file_name}\n"
        f"[bold]Collection:[/bold] {col_name}",
        title="📄 Processing Document",
        border_style="cyan"
    ))

    if debug:
        console.print("[dim]Debug mode is on[/dim]")

    # ----- STEP 1: Extract text -----
    with stage("extract", report):
        console.print("[bold]1/5[/bold] Extracting text...")
        document = extract_document(path)
        console.print(f"    [green]✓ Extracted text from {path}[/green]")

    if debug:
        console.print("[dim]Extracted text:[/dim]")
        console.print(document.raw_text, markup=False)

    # ----- STEP 2: Create chunks -----
    with stage("chunk", report):
        budget = resolve_chunk_size(
            CHUNK_SIZE if chunk_size is None else chunk_size,
            lenient=lenient_chunk_size,
        )
        report.chunk_size = budget
        console.print(f"[bold]2/5[/bold] Splitting into chunks of at most {budget} tokens...")
        chunks = Chunker(budget, token_counter=token_counter).chunk(document.raw_text)
        report.chunks_created = len(chunks)
        console.print(f"    [green]✓ {len(chunks)} chunks created[/green]")

    if debug:
        console.print("[dim]Chunks:[/dim]")
        console.print([c.text for c in chunks], markup=False)

    if not chunks:
        console.print("[yellow]⚠ Nothing to index[/yellow]")
        return report

    if store is None:
        from .store import MilvusStore
        store = MilvusStore()

    # ----- STEP 3: Provision collection -----
    with stage("collection", report):
        console.print(f"[bold]3/5[/bold] Preparing collection '{col_name}'...")
        # Checked before any drop or create
        embedder = embedder or EmbeddingBatchClient()
        if embedder.dim != dim:
            raise InvariantViolation(
                f"Embedding model {embedder.model_name} produces {embedder.dim} dimensions, "
                f"collection is configured for {dim}",
                {"model": embedder.model_name, "dims": embedder.dim, "expected": dim},
            )
        manager = CollectionManager(
            store,
            conflict_policy=conflict_policy,
            allow_auto_provision=allow_auto_provision,
        )
        collection = manager.ensure(col_name, dim, metric)
        report.collection_state = collection.state

    # ----- STEP 4: Generate embeddings -----
    with stage("embed", report):
        console.print("[bold]4/5[/bold] Embedding chunks...")
        vectors = embedder.embed(chunks)
        report.vectors_produced = len(vectors)
        console.print(f"    [green]✓ Embedded {len(vectors)} chunks[/green]")

    if debug and vectors:
        console.print(f"[dim]Embeddings: {len(vectors)} x {len(vectors[0])}[/dim]")
        for i, v in enumerate(vectors):
            console.print(f"[dim]  {i}: {v[:4]}...[/dim]")

    # ----- STEP 5: Build points and upload -----
    with stage("build", report):
        points = build(
            document.path,
            chunks,
            vectors,
            vector_size=collection.vector_size,
            id_strategy=id_strategy,
        )

    with stage("upsert", report):
        console.print(f"[bold]5/5[/bold] Uploading {len(points)} points to Milvus...")
        try:
            report.points_acknowledged = Upserter(store, show_progress=show_progress).upsert(
                collection, points, width
            )
        except IngestError as e:
            report.points_acknowledged = getattr(e, "acknowledged", 0)
            raise

    console.print(Panel.fit(
        f"[green]✓ Document indexed successfully![/green]\n\n"
        f"[bold]File:[/bold] {report.file_name}\n"
        f"[bold]Collection:[/bold] {report.collection_name} ({collection.state.value})\n"
        f"[bold]Chunks:[/bold] {report.chunks_created}\n"
        f"[bold]Points:[/bold] {report.points_acknowledged}",
        title="✅ Indexing Complete",
        border_style="green"
    ))

    return report


def describe_failure(error: IngestError) -> str:
    """One-line summary of where a run stopped and what it had done."""
    report = error.report
    if report is None:
        return f"{type(error).__name__}: {error}"
    return (
        f"{type(error).__name__} during '{error.stage}': {error} "
        f"(chunks={report.chunks_created}, vectors={report.vectors_produced}, "
        f"points={report.points_acknowledged})"
    )

