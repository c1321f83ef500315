# analyze_bloat: the one synchronous entry point of the analysis core.
#
#   resolve root ──► enumerate refs ──► resolve sizes (worker pool) ──► inventory
#        │                                                               │
#        └──► directory measurements (own threads) ──────────────────────┤
#                                                                        ▼
#                                      category totals + recommendations ─► BloatReport
#
# Only a bad root or unreadable history ends in Err.  Failed size batches and
# failed directory measurements degrade the report instead.

from __future__ import annotations

import logging
import threading

from result import Err, Ok

from repobloat.config.defaults import default_config
from repobloat.config.schema import AppConfig
from repobloat.models.enums import AnalysisErrorCode
from repobloat.models.objects import (
    AnalysisError,
    CancelCheck,
    ObjectStoreError,
    ProgressCallback,
)
from repobloat.models.report import AnalysisResult, AnalyzeOptions, BloatReport
from repobloat.services.categories import category_totals
from repobloat.services.enumerator import enumerate_objects
from repobloat.services.inventory import MeasurementJob, build_inventory, select_subset, summarize
from repobloat.services.recommendations import generate_recommendations
from repobloat.services.resolver import resolve_sizes
from repobloat.store import RepositoryObjectStore, default_store

logger = logging.getLogger(__name__)


def _cancelled_error(root: str) -> AnalysisError:
    return AnalysisError(code=AnalysisErrorCode.CANCELLED, path=root, message="Analysis cancelled")


def analyze_bloat(
    repo_path: str,
    options: AnalyzeOptions | None = None,
    *,
    store: RepositoryObjectStore | None = None,
    config: AppConfig | None = None,
    progress_callback: ProgressCallback | None = None,
    cancel_check: CancelCheck | None = None,
) -> AnalysisResult:
    options = options or AnalyzeOptions()
    config = config or default_config()
    store = store or default_store()

    resolved = store.resolve_root(repo_path)
    if isinstance(resolved, AnalysisError):
        return Err(resolved)
    root = resolved

    # Latches: once cancellation is seen, every later check agrees.
    cancelled = threading.Event()

    def _is_cancelled() -> bool:
        if cancelled.is_set():
            return True
        if cancel_check is not None and cancel_check():
            cancelled.set()
            return True
        return False

    measurements = MeasurementJob(store, root, _is_cancelled).start()

    try:
        refs = list(enumerate_objects(store, root, options.scope))
    except ObjectStoreError as exc:
        measurements.wait()
        return Err(
            AnalysisError(
                code=AnalysisErrorCode.HISTORY_UNREADABLE,
                path=root,
                message=f"Cannot traverse history: {exc}",
            )
        )
    logger.debug("Enumerated %d objects in %s (%s)", len(refs), root, options.scope.value)
    if progress_callback is not None:
        try:
            progress_callback("enumerate", len(refs), len(refs))
        except Exception:  # noqa: BLE001
            logger.exception("Progress callback failed")

    if _is_cancelled():
        measurements.wait()
        return Err(_cancelled_error(root))

    resolution = resolve_sizes(
        store,
        root,
        (ref.identifier for ref in refs),
        batch_size=config.batch_size,
        workers=config.resolve_workers,
        progress_callback=progress_callback,
        cancel_check=_is_cancelled,
    )
    directories = measurements.wait()
    if resolution.cancelled or _is_cancelled():
        return Err(_cancelled_error(root))

    inventory = build_inventory(refs, resolution.sizes)

    if resolution.failures:
        logger.warning(
            "%d of %d size batches failed; %d objects left unresolved",
            len(resolution.failures),
            resolution.batches,
            resolution.unresolved_count,
        )

    report = BloatReport(
        inventory_subset=select_subset(inventory, options.min_size_bytes, options.result_limit),
        summary=summarize(inventory, options.min_size_bytes, directories),
        category_totals=category_totals(inventory),
        recommendations=generate_recommendations(inventory, directories, config.thresholds),
        failed_batches=list(resolution.failures),
        unresolved_count=resolution.unresolved_count,
    )
    return Ok(report)
