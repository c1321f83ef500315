from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping

from repobloat.models.enums import MeasurementKind, MeasurementStatus
from repobloat.models.objects import (
    CancelCheck,
    DirectoryMeasurement,
    DirectorySizeSummary,
    ObjectRef,
    ObjectStoreError,
    SizedObject,
)
from repobloat.models.report import BloatSummary
from repobloat.store import RepositoryObjectStore

logger = logging.getLogger(__name__)


def build_inventory(refs: Iterable[ObjectRef], sizes: Mapping[str, int]) -> list[SizedObject]:
    """Join refs with resolved sizes, largest first.

    Refs without a resolved size are dropped, never zero-filled.  The sort is
    stable, so equal sizes keep enumeration order.
    """
    inventory = [SizedObject.from_ref(ref, sizes[ref.identifier]) for ref in refs if ref.identifier in sizes]
    inventory.sort(key=lambda obj: obj.size, reverse=True)
    return inventory


def select_subset(inventory: list[SizedObject], min_size_bytes: int, limit: int) -> list[SizedObject]:
    filtered = [obj for obj in inventory if obj.size >= min_size_bytes]
    return filtered[: max(0, limit)]


def summarize(
    inventory: list[SizedObject],
    min_size_bytes: int,
    directories: DirectorySizeSummary,
) -> BloatSummary:
    return BloatSummary(
        history_store=directories.history_store,
        working_tree=directories.working_tree,
        total_object_size=sum(obj.size for obj in inventory),
        object_count=len(inventory),
        filtered_count=sum(1 for obj in inventory if obj.size >= min_size_bytes),
    )


def measure_directory(
    store: RepositoryObjectStore,
    root: str,
    kind: MeasurementKind,
    cancel_check: CancelCheck | None = None,
) -> DirectoryMeasurement:
    if cancel_check is not None and cancel_check():
        return DirectoryMeasurement.unavailable(kind, "cancelled", MeasurementStatus.SKIPPED)
    try:
        size = store.measure_directory(root, kind)
    except (ObjectStoreError, OSError) as exc:
        logger.warning("Measuring %s of %s failed: %s", kind.value, root, exc)
        return DirectoryMeasurement.unavailable(kind, str(exc))
    return DirectoryMeasurement.measured(kind, size)


class MeasurementJob:
    """Both directory measurements, each on its own thread.

    ``start`` returns immediately so the measurements overlap with size
    resolution; ``wait`` blocks until both have finished.
    """

    def __init__(
        self,
        store: RepositoryObjectStore,
        root: str,
        cancel_check: CancelCheck | None = None,
    ) -> None:
        self._store = store
        self._root = root
        self._cancel_check = cancel_check
        self._results: dict[MeasurementKind, DirectoryMeasurement] = {}
        self._lock = threading.Lock()
        self._threads = [
            threading.Thread(target=self._run, args=(kind,), daemon=True) for kind in MeasurementKind
        ]

    def _run(self, kind: MeasurementKind) -> None:
        try:
            measurement = measure_directory(self._store, self._root, kind, self._cancel_check)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected failure measuring %s", kind.value)
            measurement = DirectoryMeasurement.unavailable(kind, f"{type(exc).__name__}: {exc}")
        with self._lock:
            self._results[kind] = measurement

    def start(self) -> MeasurementJob:
        for thread in self._threads:
            thread.start()
        return self

    def wait(self) -> DirectorySizeSummary:
        for thread in self._threads:
            thread.join()
        return DirectorySizeSummary(
            history_store=self._results[MeasurementKind.HISTORY_STORE],
            working_tree=self._results[MeasurementKind.WORKING_TREE],
        )


def measure_directories(
    store: RepositoryObjectStore,
    root: str,
    cancel_check: CancelCheck | None = None,
) -> DirectorySizeSummary:
    return MeasurementJob(store, root, cancel_check).start().wait()
