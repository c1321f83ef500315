from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from result import Result

from repobloat.models.enums import Category, ObjectScope
from repobloat.models.objects import (
    AnalysisError,
    BatchResolutionFailure,
    DirectoryMeasurement,
    SizedObject,
)


@dataclass(slots=True)
class AnalyzeOptions:
    scope: ObjectScope = ObjectScope.REACHABLE_FROM_TIP
    min_size_bytes: int = 1024 * 1024
    result_limit: int = 20


@dataclass(slots=True, frozen=True)
class BloatSummary:
    history_store: DirectoryMeasurement
    working_tree: DirectoryMeasurement
    total_object_size: int
    object_count: int
    filtered_count: int

    @property
    def history_store_bytes(self) -> int:
        return self.history_store.size_bytes

    @property
    def working_tree_bytes(self) -> int:
        return self.working_tree.size_bytes

    @property
    def store_ratio(self) -> float | None:
        """History store size over working tree size, or None when it cannot be known."""
        if not (self.history_store.available and self.working_tree.available):
            return None
        if self.working_tree.size_bytes == 0:
            return None
        return self.history_store.size_bytes / self.working_tree.size_bytes

    def to_dict(self) -> dict[str, Any]:
        ratio = self.store_ratio
        return {
            "historyStoreBytes": self.history_store.size_bytes,
            "historyStoreStatus": self.history_store.status.value,
            "workingTreeBytes": self.working_tree.size_bytes,
            "workingTreeStatus": self.working_tree.status.value,
            "totalObjectSize": self.total_object_size,
            "objectCount": self.object_count,
            "filteredCount": self.filtered_count,
            "ratio": round(ratio, 2) if ratio is not None else None,
        }


@dataclass(slots=True, frozen=True)
class BloatReport:
    inventory_subset: list[SizedObject]
    summary: BloatSummary
    category_totals: dict[Category, int]
    recommendations: list[str]
    failed_batches: list[BatchResolutionFailure] = field(default_factory=list)
    unresolved_count: int = 0


AnalysisResult = Result[BloatReport, AnalysisError]
