"""
Ordered, observable registry of submitted items.

The registry maps item identity to the item's current record, in submission
order. It is written only by the orchestrators; everything else reads it
through the selection views, which are re-derived from current state on every
call.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import replace
import itertools
import logging
from pathlib import Path

from pdf_report_pipeline.domain.models import (
    DocumentSource,
    ExportNotStarted,
    ExportState,
    GenerationDone,
    GenerationState,
    GenerationStatus,
    Item,
)

logger = logging.getLogger(__name__)

ItemObserver = Callable[[Item], None]

PDF_SUFFIX = ".pdf"


class ItemRegistry:
    """Insertion-ordered mapping from identity to Item.

    Example:
        >>> registry = ItemRegistry()
        >>> added = registry.add_documents([Path("a.pdf"), Path("b.pdf")])
        >>> [item.name for item in registry.select_pending()]
        ['a.pdf', 'b.pdf']
    """

    def __init__(self) -> None:
        self._items: dict[str, Item] = {}
        self._observers: list[ItemObserver] = []
        self._counter = itertools.count(1)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, identity: object) -> bool:
        return identity in self._items

    def subscribe(self, observer: ItemObserver) -> None:
        """Register a callback invoked with every appended or updated item."""
        self._observers.append(observer)

    def new_identity(self, source: DocumentSource) -> str:
        """Derive an identity from the document's name and modification time.

        A per-registry counter disambiguates documents submitted together with
        identical name and modification time.
        """
        return f"{source.name}-{source.modified_ns}-{next(self._counter)}"

    def add_documents(self, paths: Iterable[Path | str]) -> list[Item]:
        """Create pending items for PDF files and append them.

        Paths that don't exist or aren't PDFs are skipped with a log line.

        Args:
            paths: Candidate document paths, in submission order.

        Returns:
            The newly appended items, in submission order.
        """
        items = []
        for raw_path in paths:
            path = Path(raw_path)
            if path.suffix.lower() != PDF_SUFFIX:
                logger.info(f"Skipping non-PDF document: {path.name}")
                continue
            if not path.is_file():
                logger.warning(f"Skipping missing document: {path}")
                continue
            source = DocumentSource.from_path(path)
            items.append(Item(identity=self.new_identity(source), source=source))

        self.append(items)
        return items

    def append(self, items: Iterable[Item]) -> None:
        """Append items after all existing ones, preserving their order."""
        for item in items:
            if item.identity in self._items:
                raise ValueError(f"Duplicate item identity: {item.identity}")
            self._items[item.identity] = item
            self._notify(item)

    def update(
        self,
        identity: str,
        *,
        generation: GenerationState | None = None,
        export: ExportState | None = None,
    ) -> Item | None:
        """Merge state changes into the item matching identity.

        Args:
            identity: Identity of the item to update.
            generation: New generation state, if it changes.
            export: New export state, if it changes.

        Returns:
            The updated item, or None when no item has this identity.

        Raises:
            ValueError: If the change would start an export on an item whose
                report has not been generated.
        """
        current = self._items.get(identity)
        if current is None:
            logger.debug(f"Ignoring update for unknown item {identity}")
            return None

        changes: dict[str, GenerationState | ExportState] = {}
        if generation is not None:
            changes["generation"] = generation
        if export is not None:
            changes["export"] = export
        updated = replace(current, **changes)

        if not isinstance(updated.export, ExportNotStarted) and not isinstance(
            updated.generation, GenerationDone
        ):
            raise ValueError(
                f"Item {identity} cannot leave export state NotStarted while "
                f"generation is {updated.generation.status.value}"
            )

        self._items[identity] = updated
        self._notify(updated)
        return updated

    def get(self, identity: str) -> Item | None:
        return self._items.get(identity)

    def items(self) -> list[Item]:
        """All items in submission order."""
        return list(self._items.values())

    def select_by_generation_state(self, status: GenerationStatus) -> Iterator[Item]:
        """Lazy, order-preserving view of items in the given generation state."""
        return (item for item in self.items() if item.generation.status is status)

    def select_pending(self) -> Iterator[Item]:
        return self.select_by_generation_state(GenerationStatus.PENDING)

    def select_processed(self) -> Iterator[Item]:
        """Items that have left the Pending state (the report list)."""
        return (
            item
            for item in self.items()
            if item.generation.status is not GenerationStatus.PENDING
        )

    def pending_count(self) -> int:
        return sum(1 for _ in self.select_pending())

    def _notify(self, item: Item) -> None:
        for observer in self._observers:
            observer(item)
