from __future__ import annotations

from repobloat.models.enums import MeasurementKind
from repobloat.models.objects import DirectoryMeasurement, DirectorySizeSummary, ObjectRef, SizedObject

MB = 1024 * 1024


def oid(n: int) -> str:
    return f"{n:040x}"


def make_ref(n: int, path: str) -> ObjectRef:
    return ObjectRef(identifier=oid(n), logical_path=path)


def make_sized(n: int, path: str, size: int) -> SizedObject:
    return SizedObject(identifier=oid(n), logical_path=path, size=size)


def make_dirs(history: int | None = 0, working: int | None = 0) -> DirectorySizeSummary:
    """Directory summary; ``None`` marks a side as unavailable."""

    def _m(kind: MeasurementKind, value: int | None) -> DirectoryMeasurement:
        if value is None:
            return DirectoryMeasurement.unavailable(kind, "boom")
        return DirectoryMeasurement.measured(kind, value)

    return DirectorySizeSummary(
        history_store=_m(MeasurementKind.HISTORY_STORE, history),
        working_tree=_m(MeasurementKind.WORKING_TREE, working),
    )
