"""Selection & Bulk-Action Manager."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable

from .errors import MediaLibraryError
from .file_registry import FileRegistry

logger = logging.getLogger(__name__)


@dataclass
class BulkResult:
    """Outcome of a best-effort bulk action."""
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class SelectionManager:
    """Set of selected file ids, kept in selection order."""

    def __init__(self, registry: FileRegistry):
        self.registry = registry
        self._selected: dict[str, None] = {}

    @property
    def selected(self) -> list[str]:
        return list(self._selected)

    def __len__(self) -> int:
        return len(self._selected)

    def is_selected(self, file_id: str) -> bool:
        return file_id in self._selected

    def toggle(self, file_id: str) -> bool:
        """Flip one id; returns whether it is now selected."""
        if file_id in self._selected:
            del self._selected[file_id]
            return False
        self._selected[file_id] = None
        return True

    def select_all(self, visible_ids: Iterable[str]) -> None:
        """Replace the selection with *visible_ids*."""
        self._selected = dict.fromkeys(visible_ids)

    def clear(self) -> None:
        self._selected.clear()

    async def delete_selected(self) -> BulkResult:
        """Delete every selected file concurrently; failures do not stop the others.

        The selection is cleared whatever the outcome.
        """
        ids = self.selected
        result = BulkResult()
        try:
            outcomes = await asyncio.gather(
                *(self.registry.delete(file_id) for file_id in ids),
                return_exceptions=True,
            )
        finally:
            self.clear()

        for file_id, outcome in zip(ids, outcomes):
            if isinstance(outcome, MediaLibraryError):
                result.failed.append(file_id)
                result.errors[file_id] = outcome.message
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.succeeded.append(file_id)

        logger.info(
            "Bulk delete: %d succeeded, %d failed", len(result.succeeded), len(result.failed),
        )
        return result
