from pathlib import Path
from typing import Generator, List, Optional

from filters import PatternSet

_ALL_FILES = PatternSet()


def scan_directory(
    source_dir: Path,
    patterns: Optional[PatternSet] = None,
) -> Generator[str, None, None]:
    """
    Walk source_dir recursively, yielding the POSIX-style relative path of
    every regular file selected by patterns, in sorted order. Symlinks
    are skipped.
    """
    patterns = patterns or _ALL_FILES
    for file_path in sorted(source_dir.rglob("*")):
        if file_path.is_symlink() or not file_path.is_file():
            continue
        rel = file_path.relative_to(source_dir)
        if not patterns.is_selected(rel):
            continue
        yield rel.as_posix()


def list_candidates(source_dir: Path, patterns: Optional[PatternSet] = None) -> List[str]:
    """Materialize the candidate list; also sizes the progress bar."""
    return list(scan_directory(source_dir, patterns))
