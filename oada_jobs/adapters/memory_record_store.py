"""In-memory record store for development and testing."""

from __future__ import annotations

import asyncio
import copy
from typing import Any
from uuid import uuid4

from oada_jobs.config.logging_config import get_logger
from oada_jobs.domain.exceptions import RecordNotFoundError, RecordStoreError
from oada_jobs.domain.tree import subtree
from oada_jobs.ports.record_store import RecordStorePort

logger = get_logger(__name__)

_MISSING = object()


def _segments(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def _merge_into(target: dict[str, Any], data: dict[str, Any]) -> None:
    for key, value in data.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge_into(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


class InMemoryRecordStore(RecordStorePort):
    """Record store backed by nested dicts.

    PUT deep-merges like OADA does, POST appends to a list or under a
    generated key and DELETE of a missing path is a no-op. Every operation
    yields to the event loop once so callers see the same suspension points
    as with a remote store. ``operations`` records ``(method, path)`` pairs
    in call order.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._root: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self.operations: list[tuple[str, str]] = []

    async def get(self, path: str) -> Any:
        await self._record("get", path)
        node = self._find(path)
        if node is _MISSING:
            raise RecordNotFoundError(path)
        return copy.deepcopy(node)

    async def put(
        self, path: str, data: dict[str, Any], tree: dict[str, Any] | None = None
    ) -> None:
        await self._record("put", path)
        if not isinstance(data, dict):
            raise RecordStoreError(f"PUT body for {path} must be an object")
        node = self._materialize(path, tree)
        _merge_into(node, data)

    async def post(self, path: str, data: Any) -> str:
        await self._record("post", path)
        existing = self._find(path)
        if isinstance(existing, list):
            existing.append(copy.deepcopy(data))
            return str(len(existing) - 1)

        node = self._materialize(path, None)
        key = uuid4().hex
        node[key] = copy.deepcopy(data)
        return key

    async def delete(self, path: str) -> None:
        await self._record("delete", path)
        segments = _segments(path)
        if not segments:
            raise RecordStoreError("Refusing to delete the store root")

        parent: Any = self._root
        for segment in segments[:-1]:
            if not isinstance(parent, dict) or segment not in parent:
                logger.debug("record_delete_missing", path=path)
                return
            parent = parent[segment]

        if isinstance(parent, dict):
            parent.pop(segments[-1], None)

    def snapshot(self) -> dict[str, Any]:
        """Return a deep copy of the whole store."""
        return copy.deepcopy(self._root)

    def _find(self, path: str) -> Any:
        node: Any = self._root
        for segment in _segments(path):
            if not isinstance(node, dict) or segment not in node:
                return _MISSING
            node = node[segment]
        return node

    async def _record(self, method: str, path: str) -> None:
        await asyncio.sleep(0)
        self.operations.append((method, path))

    def _materialize(self, path: str, tree: dict[str, Any] | None) -> dict[str, Any]:
        node = self._root
        shape = tree
        for segment in _segments(path):
            shape = subtree(shape, segment)
            child = node.get(segment)
            if child is None:
                child = {}
                if shape and "_type" in shape:
                    child["_type"] = shape["_type"]
                node[segment] = child
            elif not isinstance(child, dict):
                raise RecordStoreError(f"Cannot write below non-object at {path}")
            node = child
        return node


__all__ = ["InMemoryRecordStore"]
