# Size resolution in bounded batches.
#
# Identifiers are cut into fixed-size batches and each batch is answered by
# one store query.  A fixed pool of worker threads drains a queue of batches;
# every batch yields a Result:
#
#   Ok({identifier: size})          merged into the shared map under one lock
#   Err(BatchResolutionFailure)     recorded; its identifiers stay unresolved
#
# Batch boundaries never change the output: the merged map is keyed by
# identifier and ordering is restored later from the enumeration order.
#
# Cancellation is polled before a worker starts a batch.  A batch that has
# already been handed to the store always runs to completion.

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from itertools import batched

from result import Err, Ok, Result

from repobloat.models.objects import (
    BatchResolutionFailure,
    CancelCheck,
    ObjectStoreError,
    ProgressCallback,
)
from repobloat.store import RepositoryObjectStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500
DEFAULT_WORKERS = 4

BatchResult = Result[dict[str, int], BatchResolutionFailure]


@dataclass(slots=True, frozen=True)
class _Batch:
    index: int
    identifiers: tuple[str, ...]


@dataclass(slots=True)
class Resolution:
    sizes: dict[str, int] = field(default_factory=dict)
    failures: list[BatchResolutionFailure] = field(default_factory=list)
    requested: int = 0
    batches: int = 0
    skipped_batches: int = 0
    cancelled: bool = False

    @property
    def unresolved_count(self) -> int:
        return self.requested - len(self.sizes)


def resolve_batch(store: RepositoryObjectStore, root: str, index: int, identifiers: tuple[str, ...]) -> BatchResult:
    """Resolve one batch; any store failure marks the whole batch unresolved."""
    try:
        found = store.batch_resolve_sizes(root, identifiers)
    except ObjectStoreError as exc:
        return Err(BatchResolutionFailure(batch_index=index, identifiers=len(identifiers), message=str(exc)))
    wanted = set(identifiers)
    return Ok({identifier: size for identifier, size in found.items() if identifier in wanted})


def resolve_sizes(
    store: RepositoryObjectStore,
    root: str,
    identifiers: Iterable[str],
    batch_size: int = DEFAULT_BATCH_SIZE,
    workers: int = DEFAULT_WORKERS,
    progress_callback: ProgressCallback | None = None,
    cancel_check: CancelCheck | None = None,
) -> Resolution:
    batches = [_Batch(i, chunk) for i, chunk in enumerate(batched(identifiers, max(1, batch_size)))]
    resolution = Resolution(
        requested=sum(len(b.identifiers) for b in batches),
        batches=len(batches),
    )
    if not batches:
        return resolution

    total = len(batches)
    q: queue.Queue[_Batch | None] = queue.Queue()
    for batch in batches:
        q.put(batch)

    merge_lock = threading.Lock()
    cancelled = threading.Event()
    done = 0

    def _is_cancelled() -> bool:
        if cancelled.is_set():
            return True
        if cancel_check is not None and cancel_check():
            cancelled.set()
            return True
        return False

    def _merge(batch: _Batch, outcome: BatchResult) -> None:
        nonlocal done
        with merge_lock:
            match outcome:
                case Ok(found):
                    resolution.sizes.update(found)
                case Err(failure):
                    resolution.failures.append(failure)
            done += 1
            finished = done
        if isinstance(outcome, Err):
            logger.warning(
                "Size batch %d (%d identifiers) failed: %s",
                batch.index,
                len(batch.identifiers),
                outcome.err_value.message,
            )
        else:
            logger.debug("Size batch %d resolved %d/%d", batch.index, len(outcome.ok_value), len(batch.identifiers))
        if progress_callback is not None:
            try:
                progress_callback("resolve", finished, total)
            except Exception:  # noqa: BLE001
                logger.exception("Progress callback failed")

    def run_worker() -> None:
        while True:
            batch = q.get()
            if batch is None:
                q.task_done()
                break
            try:
                if _is_cancelled():
                    with merge_lock:
                        resolution.skipped_batches += 1
                    continue
                try:
                    outcome = resolve_batch(store, root, batch.index, batch.identifiers)
                except Exception as exc:  # noqa: BLE001
                    # A worker must survive anything the store throws, or
                    # q.join() below would wait forever.
                    outcome = Err(
                        BatchResolutionFailure(
                            batch_index=batch.index,
                            identifiers=len(batch.identifiers),
                            message=f"{type(exc).__name__}: {exc}",
                        )
                    )
                _merge(batch, outcome)
            finally:
                q.task_done()

    num_workers = max(1, min(workers, total))
    threads = [threading.Thread(target=run_worker, daemon=True) for _ in range(num_workers)]
    for thread in threads:
        thread.start()
    for _ in threads:
        q.put(None)
    q.join()
    for thread in threads:
        thread.join()

    resolution.failures.sort(key=lambda f: f.batch_index)
    resolution.cancelled = cancelled.is_set()
    return resolution
