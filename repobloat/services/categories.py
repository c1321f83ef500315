from __future__ import annotations

from collections.abc import Iterable

from repobloat.models.enums import Category
from repobloat.models.objects import SizedObject

_EXTENSIONS: dict[Category, tuple[str, ...]] = {
    Category.BINARY: ("exe", "dll", "so", "dylib", "bin", "obj", "o", "a"),
    Category.ARCHIVE: ("zip", "tar", "gz", "bz2", "xz", "7z", "rar", "tgz"),
    Category.IMAGE: ("jpg", "jpeg", "png", "gif", "bmp", "tiff", "psd", "svg", "webp", "ico"),
    Category.VIDEO: ("mp4", "avi", "mov", "wmv", "flv", "webm", "mkv"),
    Category.AUDIO: ("mp3", "wav", "ogg", "flac", "aac", "m4a"),
    Category.DATA: ("db", "sqlite", "sql", "csv", "json", "xml", "parquet"),
    Category.DOCUMENT: ("pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx"),
    Category.PACKAGE: ("jar", "war", "ear", "whl", "gem", "nupkg"),
    Category.LOG: ("log",),
}

_BY_EXTENSION: dict[str, Category] = {ext: cat for cat, exts in _EXTENSIONS.items() for ext in exts}

# Substring signals checked when the extension says nothing, in enum order.
# Most are the category name itself; nodemodules is spelled as on disk.
_SIGNALS: tuple[tuple[str, Category], ...] = tuple(
    ("node_modules" if cat is Category.NODEMODULES else cat.value, cat) for cat in Category if cat is not Category.OTHER
)


def extension_of(path: str) -> str:
    """Lowercased text after the last dot of the basename, or '' when there is none."""
    basename = path.rsplit("/", 1)[-1]
    _, dot, ext = basename.rpartition(".")
    if not dot or not ext:
        return ""
    return ext.lower()


def categorize(path: str) -> Category:
    """Map any path to exactly one category; never raises."""
    category = _BY_EXTENSION.get(extension_of(path))
    if category is not None:
        return category
    lpath = path.lower()
    for signal, cat in _SIGNALS:
        if signal in lpath:
            return cat
    return Category.OTHER


def category_totals(inventory: Iterable[SizedObject]) -> dict[Category, int]:
    """Sum object sizes per category.  Every category is present, possibly as 0."""
    totals: dict[Category, int] = {cat: 0 for cat in Category}
    for obj in inventory:
        totals[categorize(obj.logical_path)] += obj.size
    return totals
