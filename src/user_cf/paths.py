from __future__ import annotations

from pathlib import Path


def get_repo_root() -> Path:
    """Return repo root by searching upwards for `config.yaml` or `.git`."""
    start = Path.cwd().resolve()

    for candidate in (start, *start.parents):
        if (candidate / "config.yaml").is_file() or (candidate / ".git").exists():
            return candidate

    # Fallback: search upwards from this file (useful for editable installs).
    start = Path(__file__).resolve().parent
    for candidate in (start, *start.parents):
        if (candidate / "config.yaml").is_file() or (candidate / ".git").exists():
            return candidate

    raise FileNotFoundError("Could not locate repo root (expected `config.yaml` or `.git`).")


def resolve_path(p: Path | str, base: Path) -> Path:
    """Resolve `p` against `base` unless it is already absolute."""
    p_path = Path(p)
    if not p_path.is_absolute():
        p_path = base / p_path
    return p_path.resolve()
