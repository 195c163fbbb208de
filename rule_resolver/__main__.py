from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.console import Console

from rule_resolver.config import ConfigRepository, ResolverConfig
from rule_resolver.engine import RuleEngine
from rule_resolver.errors import RuleResolverError
from rule_resolver.logs import configure_logging
from rule_resolver.rules.compilers import COMPILERS
from rule_resolver.rules.models import Origin
from rule_resolver.sources import RuleSourceService
from rule_resolver.tui import ResolverConsoleUI


FORMAT_VALUES = ["rich", *COMPILERS]
ORIGIN_VALUES = [origin.value for origin in Origin]


def _config_repo(obj: Dict[str, Any]) -> ConfigRepository:
    return ConfigRepository(obj.get("config_root"))


def _load_config(obj: Dict[str, Any]) -> ResolverConfig:
    try:
        return _config_repo(obj).load()
    except RuleResolverError as exc:
        raise click.ClickException(str(exc))


def _source_service(obj: Dict[str, Any]) -> RuleSourceService:
    return RuleSourceService(_load_config(obj), extra_roots=obj.get("roots", ()))


def _build_engine(service: RuleSourceService) -> RuleEngine:
    try:
        return service.build_engine()
    except RuleResolverError as exc:
        raise click.ClickException(f"Fatal: {exc}")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--root",
    "roots",
    multiple=True,
    type=click.Path(path_type=Path, file_okay=False),
    help="Extra rules directory loaded with project origin.",
)
@click.option(
    "--config-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Config directory (defaults to ~/.config/rule-resolver).",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity.")
@click.pass_context
def cli(ctx: click.Context, roots: tuple[Path, ...], config_dir: Optional[Path], verbose: int) -> None:
    """Resolve scoped rule documents into one effective rule set."""
    configure_logging(verbose)
    ctx.obj = {"roots": roots, "config_root": config_dir}


@cli.command(help="Resolve the effective rule set for a target file.")
@click.argument("target")
@click.option("--tool", "tool_id", default=None, help="Consuming tool identifier.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(FORMAT_VALUES, case_sensitive=False),
    default="rich",
)
@click.pass_obj
def resolve(obj: Dict[str, Any], target: str, tool_id: Optional[str], output_format: str) -> None:
    service = _source_service(obj)
    engine = _build_engine(service)
    ui = ResolverConsoleUI(Console())
    ui.render_warnings(list(engine.snapshot.warnings) if engine.snapshot else [])

    try:
        rule_set = engine.resolve(target, tool_id or service.config.default_tool)
    except RuleResolverError as exc:
        raise click.ClickException(str(exc))

    normalized = output_format.lower()
    if normalized == "rich":
        ui.render_rule_set(rule_set)
        return
    click.echo(COMPILERS[normalized]().compile(rule_set), nl=False)


@cli.command("list", help="List loaded rule documents.")
@click.option("--tool", "tool_id", default=None, help="Only documents relevant to this tool.")
@click.pass_obj
def list_rules(obj: Dict[str, Any], tool_id: Optional[str]) -> None:
    ui = ResolverConsoleUI(Console())
    engine = _build_engine(_source_service(obj))
    snapshot = engine.snapshot
    documents = snapshot.ordered_documents() if snapshot else []
    if tool_id:
        documents = [doc for doc in documents if engine.matcher.matches_tool(doc, tool_id)]
    ui.render_warnings(list(snapshot.warnings) if snapshot else [])
    ui.render_documents(documents)


@cli.command(help="Load all rule sources and report problems.")
@click.pass_obj
def check(obj: Dict[str, Any]) -> None:
    ui = ResolverConsoleUI(Console())
    service = _source_service(obj)
    try:
        engine = service.build_engine()
    except RuleResolverError as exc:
        ui.render_error(exc)
        raise click.exceptions.Exit(1)

    snapshot = engine.snapshot
    warnings = list(snapshot.warnings) if snapshot else []
    ui.render_check_result(len(snapshot.documents) if snapshot else 0, warnings)
    if warnings:
        raise click.exceptions.Exit(1)


@cli.group(help="Manage configured rule source directories.")
def sources() -> None:
    pass


@sources.command("list", help="List configured rule sources.")
@click.pass_obj
def sources_list(obj: Dict[str, Any]) -> None:
    ui = ResolverConsoleUI(Console())
    ui.render_sources(RuleSourceService(_load_config(obj), obj.get("roots", ())).source_configs())


@sources.command("add", help="Add a rule source directory by name and path.")
@click.argument("name")
@click.argument("path", type=click.Path(path_type=Path))
@click.option(
    "--origin",
    type=click.Choice(ORIGIN_VALUES, case_sensitive=False),
    default=Origin.PROJECT.value,
    show_default=True,
)
@click.pass_obj
def sources_add(obj: Dict[str, Any], name: str, path: Path, origin: str) -> None:
    ui = ResolverConsoleUI(Console())
    try:
        source = _config_repo(obj).add_source(name, path, Origin.parse(origin))
    except (ValueError, RuleResolverError) as exc:
        raise click.ClickException(str(exc))
    ui.render_source_saved(source.name, str(source.path))


@sources.command("remove", help="Remove a rule source by name.")
@click.argument("name")
@click.pass_obj
def sources_remove(obj: Dict[str, Any], name: str) -> None:
    ui = ResolverConsoleUI(Console())
    repo = _config_repo(obj)
    try:
        existing = {item.name: str(item.path) for item in repo.load().sources}
        removed = repo.remove_source(name)
    except RuleResolverError as exc:
        raise click.ClickException(str(exc))
    if not removed:
        raise click.ClickException(f"Source not found: {name}")
    ui.render_source_saved(name, existing.get(name, ""), removed=True)


def main() -> int:
    try:
        cli(standalone_mode=False)
    except click.exceptions.Exit as exc:
        code = exc.exit_code
        return code if isinstance(code, int) else 1
    except click.ClickException as exc:
        exc.show()
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
