import json
import os
import tempfile
from pathlib import Path
from typing import Any


def load_json_file(path: Path) -> tuple[Any | None, str | None]:
    """Return (payload, error); a missing or empty file yields (None, None)."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None, None
    except OSError as exc:
        return None, str(exc)
    if not text.strip():
        return None, None
    try:
        return json.loads(text), None
    except ValueError as exc:
        return None, str(exc)


def save_json_file(path: Path, payload: Any) -> None:
    """Write pretty JSON next to ``path`` and move it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
            handle.write("\n")
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


def display_path(path: str | Path) -> str:
    home = Path.home()
    candidate = Path(path)
    if candidate == home:
        return "~"
    try:
        return f"~/{candidate.relative_to(home).as_posix()}"
    except ValueError:
        return str(path)


def display_text(text: str) -> str:
    """Shorten home-directory paths embedded in a message."""
    return text.replace(f"{Path.home()}{os.sep}", f"~{os.sep}")
