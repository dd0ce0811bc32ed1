from __future__ import annotations
import datetime, logging, re
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

def is_valid_date_dir(name: str) -> bool:
    if not _DATE_RE.match(name):
        return False
    try:
        datetime.datetime.strptime(name, "%Y-%m-%d")
    except ValueError:
        return False
    return True

def _entries(directory: Path) -> list[Path]:
    return sorted(directory.iterdir(), key=lambda p: p.name)

def iter_date_dirs(root: str | Path) -> Iterator[Path]:
    """Date-named subdirectories of root. A missing root yields nothing."""
    root = Path(root)
    if not root.exists():
        return
    for entry in _entries(root):
        if entry.is_dir() and is_valid_date_dir(entry.name):
            yield entry

def iter_post_files(root: str | Path) -> Iterator[Path]:
    """Markdown files one level down in date directories, plus flat `.md` files in root.

    A read failure on root propagates; an unreadable date directory is skipped.
    """
    root = Path(root)
    if not root.exists():
        return
    for entry in _entries(root):
        if entry.is_dir():
            if not is_valid_date_dir(entry.name):
                continue
            try:
                files = _entries(entry)
            except OSError as e:
                logger.debug("skipping unreadable date directory %s: %s", entry, e)
                continue
            for f in files:
                if f.suffix == ".md" and f.is_file():
                    yield f
        elif entry.suffix == ".md":
            yield entry

def find_in_date_dirs(root: str | Path, filename: str) -> Path | None:
    for d in iter_date_dirs(root):
        candidate = d / filename
        if candidate.is_file():
            return candidate
    return None

def is_dir_empty(directory: Path) -> bool:
    return next(directory.iterdir(), None) is None
