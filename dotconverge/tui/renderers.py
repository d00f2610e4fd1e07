import json
from pathlib import Path

from rich.console import Console

from dotconverge.models import RunReport
from dotconverge.tui.enums import UIStyle
from dotconverge.tui.sections import UISection
from dotconverge.tui.tables import ActionsTable, ReportTable
from dotconverge.utils import compact_home_path, compact_home_paths_in_text


class ConvergeConsoleUI:
    def __init__(self, console: Console | None = None, home: Path | None = None) -> None:
        self.console = console or Console()
        self.home = home or Path.home()

    def render_report(self, report: RunReport, mode: str) -> None:
        self.console.print(
            UISection.wrap(
                "convergence overview",
                ReportTable.summary_block(report, mode=mode),
                style=UIStyle.BLUE.value,
            )
        )

        results = report.sorted_results()
        if results:
            border = UIStyle.RED.value if report.has_failures() else UIStyle.GREEN.value
            self.console.print(
                UISection.wrap(
                    "results",
                    ReportTable.results_table(results, home=self.home),
                    style=border,
                )
            )
        else:
            self.console.print(
                UISection.bullets("results", ["No actions attempted."], style=UIStyle.DIM.value)
            )

        if report.skipped:
            self.console.print(
                UISection.bullets(
                    "skipped",
                    [compact_home_paths_in_text(item, self.home) for item in report.skipped],
                    style=UIStyle.YELLOW.value,
                )
            )

        failures = report.failures()
        if failures:
            self.console.print(
                UISection.bullets(
                    "needs manual resolution",
                    [
                        compact_home_paths_in_text(
                            f"{item.error.value}: {item.message}", self.home
                        )
                        for item in failures
                    ],
                    style=UIStyle.RED.value,
                )
            )

    def render_report_json(self, report: RunReport) -> None:
        self.console.print_json(json.dumps(report.as_dict()))

    def render_actions(self, rows: list[dict[str, str]], manifest: Path) -> None:
        if not rows:
            self.console.print(
                UISection.bullets(
                    "actions",
                    [f"No actions declared in {compact_home_path(manifest, self.home)}"],
                    style=UIStyle.YELLOW.value,
                )
            )
            return
        self.console.print(
            UISection.wrap(
                "declared actions",
                ActionsTable.declared_table(rows, home=self.home),
                style=UIStyle.BLUE.value,
                subtitle=compact_home_path(manifest, self.home),
            )
        )

    def render_manifest_valid(self, manifest: Path, count: int) -> None:
        self.console.print(
            UISection.bullets(
                "manifest",
                [f"{compact_home_path(manifest, self.home)} is valid ({count} actions)"],
                style=UIStyle.GREEN.value,
            )
        )
