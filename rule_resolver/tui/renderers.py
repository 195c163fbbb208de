from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from rule_resolver.config import SourceConfig
from rule_resolver.rules.models import EffectiveRuleSet, RuleDocument
from rule_resolver.tui.enums import UIStyle
from rule_resolver.tui.tables import ConflictTable, DocumentTable, RuleSetTable, SourcesTable
from rule_resolver.utils import display_path, display_text


def _panel(title: str, body: Any, style: str) -> Panel:
    return Panel(body, title=title, border_style=style, padding=(0, 1))


class ResolverConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_rule_set(self, rule_set: EffectiveRuleSet) -> None:
        self.console.print(
            _panel(
                "resolution",
                RuleSetTable.summary_block(rule_set),
                style=UIStyle.BLUE.value,
            )
        )

        if rule_set.is_empty:
            self.console.print(
                _panel(
                    "rules", "No applicable rules.", style=UIStyle.DIM.value
                )
            )
        else:
            self.console.print(
                _panel(
                    "effective rules",
                    RuleSetTable.blocks_table(rule_set),
                    style=UIStyle.CYAN.value,
                )
            )

        if rule_set.conflicts:
            self.console.print(
                _panel(
                    "conflict candidates",
                    ConflictTable.conflicts_table(rule_set.conflicts),
                    style=UIStyle.YELLOW.value,
                )
            )

    def render_documents(self, documents: list[RuleDocument]) -> None:
        if not documents:
            self.console.print(
                _panel("rules", "No rules found.", style=UIStyle.YELLOW.value)
            )
            return
        self.console.print(
            _panel(
                "rules", DocumentTable.documents_table(documents), style=UIStyle.BLUE.value
            )
        )

    def render_warnings(self, warnings: list[Exception]) -> None:
        if not warnings:
            return
        text = "\n".join(
            [f"- {escape(display_text(str(item)))}" for item in warnings]
        )
        self.console.print(
            _panel("excluded documents", text, style=UIStyle.YELLOW.value)
        )

    def render_check_result(self, loaded: int, warnings: list[Exception]) -> None:
        self.render_warnings(warnings)
        style = UIStyle.GREEN.value if not warnings else UIStyle.YELLOW.value
        self.console.print(
            _panel(
                "check",
                f"Loaded {loaded} rule documents, {len(warnings)} excluded.",
                style=style,
            )
        )

    def render_error(self, error: Exception) -> None:
        self.console.print(
            _panel(
                "error",
                escape(display_text(str(error))),
                style=UIStyle.RED.value,
            )
        )

    def render_sources(self, sources: list[SourceConfig]) -> None:
        if not sources:
            self.console.print(
                _panel(
                    "sources",
                    "No rule sources configured.",
                    style=UIStyle.YELLOW.value,
                )
            )
            return
        self.console.print(
            _panel(
                "sources", SourcesTable.sources_table(sources), style=UIStyle.BLUE.value
            )
        )

    def render_source_saved(self, name: str, path: str, removed: bool = False) -> None:
        verb = "removed" if removed else "added"
        border_style = UIStyle.YELLOW.value if removed else UIStyle.GREEN.value
        self.console.print(
            _panel(
                "source",
                f"Source {verb}: [bold]{escape(name)}[/bold]\n{escape(display_path(path))}",
                style=border_style,
            )
        )
