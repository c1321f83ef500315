from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

_MIB = 1024 * 1024

# (json_key, attr_name, minimum) for the top-level integer settings.
_INT_FIELDS: tuple[tuple[str, str, int], ...] = (
    ("batchSize", "batch_size", 1),
    ("resolveWorkers", "resolve_workers", 1),
    ("minSizeBytes", "min_size_bytes", 0),
    ("resultLimit", "result_limit", 1),
)

_THRESHOLD_FIELDS: tuple[tuple[str, str, int], ...] = (
    ("largeMediaMb", "large_media_mb", 0),
    ("packageMb", "package_mb", 0),
    ("largeObjectMb", "large_object_mb", 0),
    ("largeObjectCount", "large_object_count", 0),
    ("storeRatio", "store_ratio", 1),
)


def clamp_field(value: int, field_name: str) -> int:
    """Clamp *value* to the minimum defined for *field_name* in _INT_FIELDS."""
    for _, attr, minimum in _INT_FIELDS:
        if attr == field_name:
            return max(minimum, value)
    return value


def _get_int(data: dict[str, Any], json_key: str, default: int, minimum: int) -> int:
    return max(minimum, int(data.get(json_key, default)))


@dataclass(slots=True)
class Thresholds:
    large_media_mb: int = 5
    package_mb: int = 1
    large_object_mb: int = 10
    large_object_count: int = 10
    store_ratio: int = 3

    @property
    def large_media_bytes(self) -> int:
        return self.large_media_mb * _MIB

    @property
    def package_bytes(self) -> int:
        return self.package_mb * _MIB

    @property
    def large_object_bytes(self) -> int:
        return self.large_object_mb * _MIB

    def to_dict(self) -> dict[str, Any]:
        return {json_key: getattr(self, attr) for json_key, attr, _ in _THRESHOLD_FIELDS}

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: Thresholds) -> Thresholds:
        return cls(
            **{attr: _get_int(data, json_key, getattr(defaults, attr), minimum) for json_key, attr, minimum in _THRESHOLD_FIELDS}
        )


@dataclass(slots=True)
class AppConfig:
    thresholds: Thresholds = field(default_factory=Thresholds)
    batch_size: int = 500
    resolve_workers: int = 4
    min_size_bytes: int = _MIB
    result_limit: int = 20
    include_deleted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "batchSize": self.batch_size,
            "resolveWorkers": self.resolve_workers,
            "minSizeBytes": self.min_size_bytes,
            "resultLimit": self.result_limit,
            "includeDeleted": self.include_deleted,
            "thresholds": self.thresholds.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: AppConfig) -> AppConfig:
        thresholds_raw = data.get("thresholds", {})
        if not isinstance(thresholds_raw, dict):
            msg = "thresholds must be a JSON object"
            raise ValueError(msg)
        thresholds = Thresholds.from_dict(thresholds_raw, defaults.thresholds)

        int_kwargs: dict[str, int] = {}
        for json_key, attr, minimum in _INT_FIELDS:
            int_kwargs[attr] = _get_int(data, json_key, getattr(defaults, attr), minimum)

        return cls(
            thresholds=thresholds,
            include_deleted=bool(data.get("includeDeleted", defaults.include_deleted)),
            **int_kwargs,
        )
