from __future__ import annotations

from collections.abc import Sequence

from repobloat.config.schema import Thresholds
from repobloat.models.enums import Category
from repobloat.models.objects import DirectorySizeSummary, SizedObject
from repobloat.services.categories import categorize

HEALTHY = "Repository looks healthy!"

_MEDIA = frozenset({Category.IMAGE, Category.VIDEO, Category.AUDIO})
_PACKAGED = frozenset({Category.PACKAGE, Category.ARCHIVE})


def _store_bloated(directories: DirectorySizeSummary, ratio: int) -> bool:
    # An unmeasured side never fires the rule; there is no ratio to compare.
    if not (directories.history_store.available and directories.working_tree.available):
        return False
    return directories.history_store_bytes > ratio * directories.working_tree_bytes


def generate_recommendations(
    inventory: Sequence[SizedObject],
    directories: DirectorySizeSummary,
    thresholds: Thresholds,
) -> list[str]:
    """Evaluate every rule in order and return the advisories that fired.

    Rules are independent; the healthy message appears only when none fired.
    """
    has_node_modules = False
    has_vendor = False
    has_large_media = False
    has_packages = False
    large_objects = 0

    for obj in inventory:
        path = obj.logical_path
        if "node_modules" in path:
            has_node_modules = True
        if "vendor/" in path:
            has_vendor = True
        if obj.size > thresholds.large_object_bytes:
            large_objects += 1
        category = categorize(path)
        if category in _PACKAGED and obj.size > thresholds.package_bytes:
            has_packages = True
        elif category in _MEDIA and obj.size > thresholds.large_media_bytes:
            has_large_media = True

    recommendations: list[str] = []
    if has_node_modules:
        recommendations.append("node_modules in history: use git-filter-repo to remove it")
    if has_vendor:
        recommendations.append("vendor/ directory in history: consider removing it")
    if has_large_media:
        recommendations.append("Large media files detected: consider Git LFS")
    if has_packages:
        recommendations.append("Package files in history: use artifact storage instead")
    if _store_bloated(directories, thresholds.store_ratio):
        recommendations.append(
            f".git directory is over {thresholds.store_ratio}x the working tree: "
            "run git gc --aggressive --prune=now"
        )
    if large_objects > thresholds.large_object_count:
        mb = thresholds.large_object_mb
        recommendations.append(f"{large_objects} objects over {mb}MB: consider git-filter-repo cleanup")

    if not recommendations:
        recommendations.append(HEALTHY)
    return list(dict.fromkeys(recommendations))
