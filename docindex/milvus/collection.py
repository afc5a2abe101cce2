# collection.py - Milvus Collection Lifecycle
# =============================================================================
# Decides whether the target collection is created, kept as is, or
# dropped and recreated before any point is written.
# =============================================================================

from enum import Enum

from rich.console import Console

from .errors import CollectionProvisionError, StoreUnavailableError
from .models import CollectionRef, CollectionState, DistanceMetric

console = Console()


class ConflictPolicy(str, Enum):
    """What to do when the target collection already exists."""
    KEEP = "keep"
    CLEAR = "clear"

    @classmethod
    def parse(cls, value: "str | ConflictPolicy") -> "ConflictPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unsupported conflict policy: {value!r}") from None


class CollectionManager:
    """
    Provisions the target collection.

    Args:
        store: Vector-store adapter (see store.MilvusStore)
        conflict_policy: KEEP retains an existing collection and its points,
            CLEAR drops and recreates it. Only CLEAR is destructive.
        allow_auto_provision: If False, an absent collection is an error
            instead of being created.
    """

    def __init__(
        self,
        store,
        conflict_policy: ConflictPolicy | str = ConflictPolicy.KEEP,
        allow_auto_provision: bool = True,
    ) -> None:
        self.store = store
        self.conflict_policy = ConflictPolicy.parse(conflict_policy)
        self.allow_auto_provision = allow_auto_provision

    def probe(self, name: str) -> CollectionState:
        """Resolves UNKNOWN into ABSENT or PRESENT."""
        try:
            existing = self.store.list_collections()
        except StoreUnavailableError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Cannot list collections: {e}", {"collection": name}) from e

        return CollectionState.PRESENT if name in existing else CollectionState.ABSENT

    def ensure(
        self,
        name: str,
        vector_size: int,
        distance_metric: DistanceMetric | str = DistanceMetric.COSINE,
        clear_if_present: bool | None = None,
    ) -> CollectionRef:
        """
        Brings the collection into its terminal state for this run.

        Args:
            name: Collection name
            vector_size: Dimension of the embeddings that will be written
            distance_metric: Similarity function fixed at creation
            clear_if_present: Overrides the configured conflict policy when set

        Returns:
            CollectionRef in state KEPT or CLEARED

        Raises:
            StoreUnavailableError: If the store cannot be reached or refuses
                a create/drop call
            CollectionProvisionError: If the collection is absent and
                auto-provisioning is disabled
        """
        metric = DistanceMetric.parse(distance_metric)
        if clear_if_present is None:
            clear = self.conflict_policy is ConflictPolicy.CLEAR
        else:
            clear = clear_if_present

        state = self.probe(name)

        if state is CollectionState.PRESENT:
            console.print(f"[yellow]⚠ Collection '{name}' already exists[/yellow]")

            if not clear:
                # Schema of a kept collection is not checked here; a
                # dimension mismatch shows up as an upsert failure.
                console.print(f"[cyan]Keeping collection '{name}', new points are added to it[/cyan]")
                return CollectionRef(
                    name=name,
                    vector_size=vector_size,
                    distance_metric=metric,
                    state=CollectionState.KEPT,
                )

            console.print(f"[yellow]⚠ Clearing collection: {name}[/yellow]")
            self._call(self.store.drop_collection, name)
            console.print(f"[green]✓ Collection '{name}' removed[/green]")

        elif not self.allow_auto_provision:
            raise CollectionProvisionError(
                f"Collection '{name}' does not exist and auto-provisioning is disabled",
                {"collection": name},
            )

        self._call(self.store.create_collection, name, vector_size, metric)
        console.print(f"[green]✓ Collection '{name}' created[/green]")

        return CollectionRef(
            name=name,
            vector_size=vector_size,
            distance_metric=metric,
            state=CollectionState.CLEARED,
        )

    @staticmethod
    def _call(operation, name: str, *args) -> None:
        try:
            operation(name, *args)
        except StoreUnavailableError:
            raise
        except Exception as e:
            raise StoreUnavailableError(
                f"{getattr(operation, '__name__', 'operation')} failed for collection '{name}': {e}",
                {"collection": name},
            ) from e


def ensure(
    store,
    name: str,
    vector_size: int,
    distance_metric: DistanceMetric | str,
    clear_if_present: bool,
) -> CollectionRef:
    """Function form of CollectionManager.ensure with an explicit clear flag."""
    return CollectionManager(store).ensure(
        name,
        vector_size,
        distance_metric,
        clear_if_present=clear_if_present,
    )
