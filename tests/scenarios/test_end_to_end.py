from __future__ import annotations

from result import Err, Ok

from repobloat.config.defaults import default_config
from repobloat.models.enums import AnalysisErrorCode, Category, MeasurementKind, ObjectScope
from repobloat.models.objects import ObjectStoreError
from repobloat.models.report import AnalyzeOptions
from repobloat.services.analyze import analyze_bloat
from repobloat.services.summary import report_to_dict
from tests.factories import MB, oid
from tests.store_mock import MemoryObjectStore


def _example_store() -> MemoryObjectStore:
    store = MemoryObjectStore()
    store.add_object("a" * 40, "vendor/lib.tar.gz", 2_000_000)
    store.add_object("b" * 40, "src/app.js", 1_000)
    store.measurements[MeasurementKind.HISTORY_STORE] = 6 * MB
    store.measurements[MeasurementKind.WORKING_TREE] = 1 * MB
    return store


class TestExampleRepository:
    def test_vendor_archive_and_store_ratio(self) -> None:
        result = analyze_bloat("/repo", AnalyzeOptions(min_size_bytes=0), store=_example_store())
        assert isinstance(result, Ok)
        report = result.unwrap()

        assert any("vendor/" in r for r in report.recommendations)
        assert any("git gc" in r for r in report.recommendations)
        assert report.category_totals[Category.ARCHIVE] == 2_000_000
        assert report.category_totals[Category.OTHER] == 1_000
        assert [obj.logical_path for obj in report.inventory_subset] == ["vendor/lib.tar.gz", "src/app.js"]

    def test_conservation(self) -> None:
        report = analyze_bloat("/repo", store=_example_store()).unwrap()
        assert sum(report.category_totals.values()) == report.summary.total_object_size

    def test_all_below_min_size(self) -> None:
        report = analyze_bloat("/repo", AnalyzeOptions(min_size_bytes=10 * MB), store=_example_store()).unwrap()

        assert report.inventory_subset == []
        assert report.summary.filtered_count == 0
        assert report.summary.total_object_size == 2_001_000
        assert report.summary.object_count == 2

    def test_result_limit(self) -> None:
        report = analyze_bloat("/repo", AnalyzeOptions(min_size_bytes=0, result_limit=1), store=_example_store()).unwrap()
        assert len(report.inventory_subset) == 1
        assert report.summary.filtered_count == 2

    def test_deterministic(self) -> None:
        store = MemoryObjectStore()
        for i in range(50):
            store.add_object(oid(i), f"dir{i % 5}/file{i}.bin", (i * 37) % 11 * 1000)
        config = default_config()
        config.batch_size = 7

        first = analyze_bloat("/repo", AnalyzeOptions(min_size_bytes=0, result_limit=100), store=store, config=config)
        second = analyze_bloat("/repo", AnalyzeOptions(min_size_bytes=0, result_limit=100), store=store, config=config)

        a, b = first.unwrap(), second.unwrap()
        assert a.inventory_subset == b.inventory_subset
        assert a.category_totals == b.category_totals
        assert a.recommendations == b.recommendations


class TestDegraded:
    def test_half_the_batches_fail(self) -> None:
        store = MemoryObjectStore()
        for i in range(1000):
            store.add_object(oid(i), f"f{i}", 10)
        store.fail_batch = lambda batch: oid(999) in batch

        report = analyze_bloat("/repo", AnalyzeOptions(min_size_bytes=0), store=store).unwrap()

        assert report.summary.object_count == 500
        assert len(report.failed_batches) == 1
        assert report.unresolved_count == 500

    def test_measurement_failure_does_not_abort(self) -> None:
        store = _example_store()
        store.measurements[MeasurementKind.WORKING_TREE] = ObjectStoreError("ls-files failed")

        report = analyze_bloat("/repo", store=store).unwrap()

        assert not report.summary.working_tree.available
        assert report.summary.store_ratio is None
        assert not any("git gc" in r for r in report.recommendations)


class TestProgress:
    def test_failing_callback_does_not_abort(self) -> None:
        seen: list[str] = []

        def _progress(phase: str, done: int, total: int) -> None:
            seen.append(phase)
            raise RuntimeError("display went away")

        result = analyze_bloat("/repo", store=_example_store(), progress_callback=_progress)

        assert isinstance(result, Ok)
        assert result.unwrap().summary.object_count == 2
        assert seen == ["enumerate", "resolve"]


class TestScope:
    def test_identifier_at_three_paths_counts_once(self) -> None:
        store = MemoryObjectStore()
        store.add_object(oid(1), "old/name.psd", 3 * MB, in_tip=False)
        store.add_object(oid(1), "renamed/name.psd", 3 * MB, in_tip=False)
        store.add_object(oid(1), "final/name.psd", 3 * MB)

        options = AnalyzeOptions(scope=ObjectScope.ALL_HISTORY, min_size_bytes=0)
        report = analyze_bloat("/repo", options, store=store).unwrap()

        assert report.summary.object_count == 1
        assert report.summary.total_object_size == 3 * MB
        assert report.inventory_subset[0].logical_path == "old/name.psd"


class TestFatal:
    def test_not_a_repository(self) -> None:
        result = analyze_bloat("/elsewhere", store=MemoryObjectStore())
        assert isinstance(result, Err)
        error = result.unwrap_err()
        assert error.code is AnalysisErrorCode.NOT_A_REPOSITORY
        assert error.is_scope_failure

    def test_unreadable_history(self) -> None:
        store = MemoryObjectStore()
        store.list_error = "fatal: missing object (shallow clone)"
        result = analyze_bloat("/repo", store=store)

        assert isinstance(result, Err)
        assert result.unwrap_err().code is AnalysisErrorCode.HISTORY_UNREADABLE
        assert "shallow" in result.unwrap_err().message

    def test_cancelled(self) -> None:
        store = _example_store()
        result = analyze_bloat("/repo", store=store, cancel_check=lambda: True)

        assert isinstance(result, Err)
        error = result.unwrap_err()
        assert error.code is AnalysisErrorCode.CANCELLED
        assert not error.is_scope_failure
        assert store.batch_calls == []

    def test_cancelled_after_first_batch(self) -> None:
        store = MemoryObjectStore()
        for i in range(10):
            store.add_object(oid(i), f"f{i}.bin", 100)
        config = default_config()
        config.batch_size = 2
        config.resolve_workers = 1

        result = analyze_bloat("/repo", store=store, config=config, cancel_check=lambda: len(store.batch_calls) >= 1)

        assert isinstance(result, Err)
        assert result.unwrap_err().code is AnalysisErrorCode.CANCELLED
        assert len(store.batch_calls) == 1


class TestReportDict:
    def test_json_shape(self) -> None:
        report = analyze_bloat("/repo", AnalyzeOptions(min_size_bytes=0), store=_example_store()).unwrap()
        d = report_to_dict(report)

        assert d["stats"]["historyStoreBytes"] == 6 * MB
        assert d["stats"]["ratio"] == 6.0
        assert d["largestFiles"][0] == {
            "hash": "a" * 40,
            "path": "vendor/lib.tar.gz",
            "size": 2_000_000,
            "category": "archive",
        }
        assert d["categoryTotals"]["archive"] == 2_000_000
        assert d["failedBatches"] == 0
