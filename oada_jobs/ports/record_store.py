"""Port definition for the tree-structured record store."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RecordStorePort(Protocol):
    """Interface for hierarchical JSON document access.

    Each individual operation is atomic; nothing spans several operations.
    """

    async def get(self, path: str) -> Any:
        """Read the document at ``path``.

        Raises:
            RecordNotFoundError: If nothing exists at ``path``
        """

    async def put(
        self, path: str, data: dict[str, Any], tree: dict[str, Any] | None = None
    ) -> None:
        """Merge ``data`` into the document at ``path``.

        Args:
            path: Target path
            data: Document fragment to merge
            tree: Optional shape used to materialize missing parents
        """

    async def post(self, path: str, data: Any) -> str:
        """Append ``data`` under ``path`` and return the generated key."""

    async def delete(self, path: str) -> None:
        """Remove whatever exists at ``path``."""


__all__ = ["RecordStorePort"]
