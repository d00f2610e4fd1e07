from collections import Counter
from pathlib import Path

from rich.markup import escape
from rich.table import Column, Table

from dotconverge.models import ActionResult, RunReport
from dotconverge.tui.enums import RESULT_STATUS_STYLE, UIStyle
from dotconverge.tui.sections import UISection
from dotconverge.utils import compact_home_path


class ReportTable:
    @staticmethod
    def summary_block(report: RunReport, mode: str) -> Table:
        statuses = Counter(result.status.value for result in report.results)
        changed = sum(1 for result in report.results if result.changed)

        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Mode", mode)
        table.add_row("Actions", str(len(report.results)))
        table.add_row("Statuses", UISection.chips(statuses))
        table.add_row("Changed", str(changed))
        table.add_row("Skipped", str(len(report.skipped)))
        return table

    @staticmethod
    def results_table(results: list[ActionResult], home: Path) -> Table:
        table = Table(
            Column(header="Method", width=12),
            Column(header="Status", width=8),
            Column(header="Installed", overflow="ellipsis", max_width=42),
            Column(header="Target", overflow="ellipsis", max_width=58),
            Column(header="Detail", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for result in results:
            style = RESULT_STATUS_STYLE.get(result.status, UIStyle.WHITE.value)
            status_text = f"[{style}]{result.status.value}[/{style}]"
            if result.failed:
                detail = f"[{style}]{result.error.value}[/{style}] {escape(result.message)}"
            elif result.changed:
                detail = escape(result.detail)
            else:
                detail = f"[{UIStyle.DIM.value}]{escape(result.detail)}[/{UIStyle.DIM.value}]"
            table.add_row(
                escape(result.method),
                status_text,
                escape(result.installed),
                escape(compact_home_path(result.target, home)),
                detail,
            )
        return table


class ActionsTable:
    @staticmethod
    def declared_table(rows: list[dict[str, str]], home: Path) -> Table:
        table = Table(
            Column(header="#", width=4, justify="right"),
            Column(header="Method", width=12),
            Column(header="Source", overflow="ellipsis", max_width=48),
            Column(header="Target", overflow="ellipsis"),
            Column(header="Flags", width=18),
            expand=True,
            header_style="bold",
        )
        for index, row in enumerate(rows, start=1):
            table.add_row(
                str(index),
                escape(row["method"]),
                escape(compact_home_path(row["source"], home)) if row["source"] else "",
                escape(compact_home_path(row["target"], home)) if row["target"] else "",
                escape(row["flags"]),
            )
        return table
