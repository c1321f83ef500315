from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Protocol

from repobloat.models.enums import MeasurementKind, ObjectScope
from repobloat.models.objects import AnalysisError
from repobloat.store.git_store import GitObjectStore


class RepositoryObjectStore(Protocol):
    """Capability interface over a content-addressed object store.

    ``list_objects``, ``batch_resolve_sizes`` and ``measure_directory`` raise
    ``ObjectStoreError`` when the underlying query fails.
    """

    def resolve_root(self, path: str) -> str | AnalysisError: ...

    def list_objects(self, root: str, scope: ObjectScope) -> Iterator[tuple[str, str]]: ...

    def batch_resolve_sizes(self, root: str, identifiers: Iterable[str]) -> dict[str, int]: ...

    def measure_directory(self, root: str, kind: MeasurementKind) -> int: ...


def default_store() -> RepositoryObjectStore:
    """Return the store backed by the ``git`` executable on PATH."""
    return GitObjectStore()


__all__ = [
    "GitObjectStore",
    "RepositoryObjectStore",
    "default_store",
]
