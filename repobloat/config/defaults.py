from __future__ import annotations

from repobloat.config.schema import AppConfig, Thresholds


def default_config() -> AppConfig:
    return AppConfig(
        thresholds=Thresholds(
            large_media_mb=5,
            package_mb=1,
            large_object_mb=10,
            large_object_count=10,
            store_ratio=3,
        ),
        batch_size=500,
        resolve_workers=4,
        min_size_bytes=1024 * 1024,
        result_limit=20,
        include_deleted=False,
    )
