from __future__ import annotations

from io import StringIO

from rich.console import Console

from repobloat.models.enums import Category
from repobloat.models.objects import BatchResolutionFailure
from repobloat.models.report import BloatReport
from repobloat.services.inventory import summarize
from repobloat.services.summary import _category_table, _largest_table, render_report, report_to_dict
from tests.factories import MB, make_dirs, make_sized


def _console() -> Console:
    return Console(file=StringIO(), force_terminal=False, width=200)


def _output(c: Console) -> str:
    f = c.file
    assert isinstance(f, StringIO)
    return f.getvalue()


def _report(subset_limit: int = 20, working: int | None = MB) -> BloatReport:
    inventory = [
        make_sized(1, "vendor/lib.tar.gz", 3 * MB),
        make_sized(2, "assets/[bold]logo.png", 2 * MB),
        make_sized(3, "src/app.js", 1000),
    ]
    totals = {cat: 0 for cat in Category}
    totals[Category.ARCHIVE] = 3 * MB
    totals[Category.IMAGE] = 2 * MB
    totals[Category.OTHER] = 1000
    return BloatReport(
        inventory_subset=inventory[:subset_limit],
        summary=summarize(inventory, 1000, make_dirs(6 * MB, working)),
        category_totals=totals,
        recommendations=["vendor/ directory in history: consider removing it"],
    )


class TestLargestTable:
    def test_rows(self) -> None:
        table = _largest_table(_report())
        assert table.row_count == 3
        assert table.title == "Largest Files"


class TestCategoryTable:
    def test_small_categories_hidden(self) -> None:
        table = _category_table(_report())
        assert table is not None
        assert table.row_count == 2

    def test_none_when_nothing_large(self) -> None:
        report = BloatReport(
            inventory_subset=[],
            summary=summarize([], 0, make_dirs()),
            category_totals={cat: 0 for cat in Category},
            recommendations=[],
        )
        assert _category_table(report) is None


class TestRenderReport:
    def test_sections(self) -> None:
        c = _console()
        render_report(c, _report(), 1000)
        out = _output(c)
        assert "Size Summary" in out
        assert "6.0x" in out
        assert "vendor/lib.tar.gz" in out
        assert "[bold]logo.png" in out
        assert "Recommendations" in out

    def test_more_files_hint(self) -> None:
        c = _console()
        render_report(c, _report(subset_limit=1), 1000)
        assert "...and 2 more large files" in _output(c)

    def test_unavailable_measurement(self) -> None:
        c = _console()
        render_report(c, _report(working=None), 1000)
        out = _output(c)
        assert "unavailable" in out
        assert "unknown" in out

    def test_failed_batches_reported(self) -> None:
        base = _report()
        report = BloatReport(
            inventory_subset=base.inventory_subset,
            summary=base.summary,
            category_totals=base.category_totals,
            recommendations=base.recommendations,
            failed_batches=[BatchResolutionFailure(batch_index=0, identifiers=500, message="x")],
            unresolved_count=500,
        )
        c = _console()
        render_report(c, report, 1000)
        assert "1 size batches failed" in _output(c)


class TestReportToDict:
    def test_objects_carry_category_and_display_path(self) -> None:
        base = _report()
        commit = make_sized(9, "", 5000)
        report = BloatReport(
            inventory_subset=[*base.inventory_subset, commit],
            summary=base.summary,
            category_totals=base.category_totals,
            recommendations=base.recommendations,
        )
        d = report_to_dict(report)

        assert [f["category"] for f in d["largestFiles"]] == ["archive", "image", "other", "other"]
        assert d["largestFiles"][-1]["path"] == "(unknown)"
        assert d["stats"]["ratio"] == 6.0
        assert d["categoryTotals"]["image"] == 2 * MB
        assert d["recommendations"] == base.recommendations
        assert d["failedBatches"] == 0
