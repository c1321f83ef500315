from __future__ import annotations

from enum import Enum


class Category(str, Enum):
    BINARY = "binary"
    ARCHIVE = "archive"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DATA = "data"
    DOCUMENT = "document"
    PACKAGE = "package"
    NODEMODULES = "nodemodules"
    LOG = "log"
    OTHER = "other"


class ObjectScope(str, Enum):
    REACHABLE_FROM_TIP = "reachable_from_tip"
    ALL_HISTORY = "all_history"


class MeasurementKind(str, Enum):
    HISTORY_STORE = "history_store"
    WORKING_TREE = "working_tree"


class MeasurementStatus(str, Enum):
    MEASURED = "measured"
    UNAVAILABLE = "unavailable"
    SKIPPED = "skipped"


class AnalysisErrorCode(str, Enum):
    NOT_FOUND = "not_found"
    NOT_A_REPOSITORY = "not_a_repository"
    HISTORY_UNREADABLE = "history_unreadable"
    CANCELLED = "cancelled"
