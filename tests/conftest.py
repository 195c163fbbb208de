import sys
from pathlib import Path
from typing import Any

from click.testing import CliRunner
import pytest


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()

from rule_resolver.rules.models import RawRuleSource  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    monkeypatch.delenv("RULE_RESOLVER_HOME", raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)


@pytest.fixture
def config_root(tmp_path: Path) -> Path:
    return tmp_path / ".config" / "rule-resolver"


@pytest.fixture
def make_source():
    def _make(
        doc_id: str,
        body: str = "",
        origin: str | None = "global",
        scope: list[str] | None = None,
        tools: list[str] | None = None,
        references: list[str] | None = None,
    ) -> RawRuleSource:
        lines = ["---"]
        if origin is not None:
            lines.append(f"origin: {origin}")
        if scope:
            lines.append("scope:")
            lines.extend(f'  - "{pattern}"' for pattern in scope)
        if tools:
            lines.append("tools:")
            lines.extend(f"  - {tool}" for tool in tools)
        if references:
            lines.append("references:")
            lines.extend(f'  - "{reference}"' for reference in references)
        lines.append("---")
        lines.append("")
        lines.append(body)
        return RawRuleSource(id=doc_id, text="\n".join(lines) + "\n")

    return _make


@pytest.fixture
def write_rule():
    def _write(root: Path, relative: str, text: str) -> Path:
        path = root / f"{relative}.md"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def cli_runner(tmp_path: Path) -> CliRunner:
    class HomeCliRunner(CliRunner):
        def invoke(self, cli: Any, args: Any = None, **kwargs: Any):  # type: ignore[override]
            env = dict(kwargs.pop("env", {}) or {})
            env.setdefault("HOME", str(tmp_path))
            env.setdefault("XDG_CONFIG_HOME", str(tmp_path / ".config"))
            env.setdefault("COLUMNS", "200")
            kwargs["env"] = env
            return super().invoke(cli, args=args, **kwargs)

    return HomeCliRunner()
