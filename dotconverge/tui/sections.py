from collections import Counter
from typing import Optional

from rich.console import RenderableType
from rich.markup import escape
from rich.panel import Panel

from dotconverge.tui.enums import UIStyle


class UISection:
    @staticmethod
    def wrap(
        title: str,
        body: RenderableType,
        style: str = UIStyle.BLUE.value,
        subtitle: Optional[str] = None,
    ) -> Panel:
        if subtitle is not None:
            subtitle = escape(subtitle)
        return Panel(body, title=title, subtitle=subtitle, border_style=style, padding=(0, 1))

    @staticmethod
    def bullets(title: str, items: list[str], style: str) -> Panel:
        body = "\n".join(f"- {escape(item)}" for item in items)
        return Panel(body, title=title, border_style=style, padding=(0, 1))

    @staticmethod
    def chips(counts: Counter) -> str:
        chips = [f"{key}={value}" for key, value in sorted(counts.items()) if value > 0]
        return "  ".join(chips) if chips else "none"
