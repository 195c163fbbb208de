from rich.markup import escape
from rich.table import Column, Table

from rule_resolver.config import SourceConfig
from rule_resolver.rules.models import ConflictCandidate, EffectiveRuleSet, RuleDocument
from rule_resolver.tui.enums import ORIGIN_STYLE, UIStyle
from rule_resolver.utils import display_path


def _joined(items) -> str:
    values = [escape(str(item)) for item in items]
    return ", ".join(values) if values else "[dim]*[/dim]"


class DocumentTable:
    @staticmethod
    def documents_table(documents: list[RuleDocument]) -> Table:
        table = Table(
            Column(header="Document", overflow="fold"),
            Column(header="Origin", width=10),
            Column(header="Scope", overflow="fold"),
            Column(header="Tools", overflow="fold"),
            Column(header="References", overflow="fold"),
            Column(header="Blocks", width=6, justify="right"),
            expand=True,
            header_style="bold",
        )
        for document in documents:
            style = ORIGIN_STYLE.get(document.origin, UIStyle.WHITE.value)
            table.add_row(
                escape(document.id),
                f"[{style}]{document.origin.value}[/{style}]",
                _joined(document.scope_patterns),
                _joined(sorted(document.tool_targets)),
                _joined(document.references) if document.references else "",
                str(len(document.blocks)),
            )
        return table


class RuleSetTable:
    @staticmethod
    def summary_block(rule_set: EffectiveRuleSet):
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Target", escape(rule_set.request.target_path))
        table.add_row("Tool", escape(rule_set.request.tool_id))
        table.add_row("Documents", _joined(rule_set.document_ids) if rule_set.document_ids else "none")
        table.add_row("Blocks", str(len(rule_set.blocks)))
        table.add_row("Conflicts", str(len(rule_set.conflicts)))
        return table

    @staticmethod
    def blocks_table(rule_set: EffectiveRuleSet) -> Table:
        table = Table(
            Column(header="#", width=4, justify="right"),
            Column(header="Document", overflow="fold", max_width=32),
            Column(header="Content", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for index, block in enumerate(rule_set.blocks, start=1):
            source = escape(block.document_id)
            if block.included_by != block.document_id:
                source = f"{source}\n[dim]via {escape(block.included_by)}[/dim]"
            table.add_row(str(index), source, escape(block.text))
        return table


class ConflictTable:
    @staticmethod
    def conflicts_table(conflicts: tuple[ConflictCandidate, ...]) -> Table:
        table = Table(
            Column(header="First", overflow="fold"),
            Column(header="Second", overflow="fold"),
            Column(header="Topics", overflow="fold"),
            Column(header="Preferred", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for conflict in conflicts:
            table.add_row(
                escape(conflict.first_id),
                escape(conflict.second_id),
                _joined(conflict.topics),
                escape(conflict.preferred_id),
            )
        return table


class SourcesTable:
    @staticmethod
    def sources_table(sources: list[SourceConfig]) -> Table:
        table = Table(
            Column(header="Source", width=20),
            Column(header="Origin", width=10),
            Column(header="Path", overflow="ellipsis"),
            Column(header="Exists", width=7),
            expand=True,
            header_style="bold",
        )
        for source in sources:
            exists = source.path.is_dir()
            marker = "[green]yes[/green]" if exists else "[red]no[/red]"
            table.add_row(
                escape(source.name),
                source.origin.value,
                escape(display_path(source.path)),
                marker,
            )
        return table
