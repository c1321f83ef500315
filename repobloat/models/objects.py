from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from repobloat.models.enums import AnalysisErrorCode, MeasurementKind, MeasurementStatus

ProgressCallback = Callable[[str, int, int], None]
CancelCheck = Callable[[], bool]

UNKNOWN_PATH = "(unknown)"

_SCOPE_FAILURES = frozenset(
    {
        AnalysisErrorCode.NOT_FOUND,
        AnalysisErrorCode.NOT_A_REPOSITORY,
        AnalysisErrorCode.HISTORY_UNREADABLE,
    }
)


class ObjectStoreError(Exception):
    """A plumbing command against the object store failed."""


@dataclass(slots=True, frozen=True)
class ObjectRef:
    identifier: str
    logical_path: str

    @property
    def display_path(self) -> str:
        return self.logical_path or UNKNOWN_PATH


@dataclass(slots=True, frozen=True)
class SizedObject:
    identifier: str
    logical_path: str
    size: int

    @property
    def display_path(self) -> str:
        return self.logical_path or UNKNOWN_PATH

    @classmethod
    def from_ref(cls, ref: ObjectRef, size: int) -> SizedObject:
        return cls(identifier=ref.identifier, logical_path=ref.logical_path, size=size)


@dataclass(slots=True, frozen=True)
class DirectoryMeasurement:
    kind: MeasurementKind
    size_bytes: int
    status: MeasurementStatus
    reason: str = ""

    @property
    def available(self) -> bool:
        return self.status is MeasurementStatus.MEASURED

    @classmethod
    def measured(cls, kind: MeasurementKind, size_bytes: int) -> DirectoryMeasurement:
        return cls(kind=kind, size_bytes=size_bytes, status=MeasurementStatus.MEASURED)

    @classmethod
    def unavailable(
        cls,
        kind: MeasurementKind,
        reason: str,
        status: MeasurementStatus = MeasurementStatus.UNAVAILABLE,
    ) -> DirectoryMeasurement:
        return cls(kind=kind, size_bytes=0, status=status, reason=reason)


@dataclass(slots=True, frozen=True)
class DirectorySizeSummary:
    history_store: DirectoryMeasurement
    working_tree: DirectoryMeasurement

    @property
    def history_store_bytes(self) -> int:
        return self.history_store.size_bytes

    @property
    def working_tree_bytes(self) -> int:
        return self.working_tree.size_bytes


@dataclass(slots=True, frozen=True)
class BatchResolutionFailure:
    batch_index: int
    identifiers: int
    message: str


@dataclass(slots=True, frozen=True)
class AnalysisError:
    code: AnalysisErrorCode
    path: str
    message: str

    @property
    def is_scope_failure(self) -> bool:
        return self.code in _SCOPE_FAILURES
