"""
Include/exclude rules for selecting source files.

Patterns (from --include/--exclude or a pattern file) support:
  *.png           — extension shorthand, case-insensitive
  .png            — same as *.png
  thumbs          — matches any directory or file named exactly 'thumbs'
  build/          — trailing slash forces directory-only match
  icons/*.png     — slash pattern matched against the relative path

An empty include list includes everything. Excludes always win.
Hidden paths (any component starting with a dot) are excluded by default.

Pattern file format (one pattern per line):
  # lines starting with # are comments
  blank lines are ignored
"""

import fnmatch
import logging
from pathlib import PurePath
from typing import Iterable, List, Optional, Set

logger = logging.getLogger(__name__)


class _Rules:
    def __init__(self, patterns: Iterable[str]) -> None:
        self.name_patterns: List[str] = []   # any path component
        self.dir_patterns: List[str] = []    # directory components only
        self.path_patterns: List[str] = []   # full relative path
        self.ext_set: Set[str] = set()

        for raw in patterns:
            p = raw.strip()
            if not p or p.startswith("#"):
                continue

            dir_only = p.endswith("/")
            p = p.rstrip("/")

            if not dir_only and p.startswith(".") and "*" not in p and "/" not in p:
                self.ext_set.add(p.lower())
                continue
            if not dir_only and p.startswith("*.") and "/" not in p:
                self.ext_set.add(p[1:].lower())
                continue

            if "/" in p:
                self.path_patterns.append(p)
            elif dir_only:
                self.dir_patterns.append(p)
            else:
                self.name_patterns.append(p)

    def is_empty(self) -> bool:
        return not (self.name_patterns or self.dir_patterns
                    or self.path_patterns or self.ext_set)

    def matches(self, rel_path: PurePath) -> bool:
        if rel_path.suffix.lower() in self.ext_set:
            return True

        parts = rel_path.parts
        for part in parts:
            if any(fnmatch.fnmatch(part, p) for p in self.name_patterns):
                return True
        for part in parts[:-1]:
            if any(fnmatch.fnmatch(part, p) for p in self.dir_patterns):
                return True

        rel = rel_path.as_posix()
        for pattern in self.path_patterns:
            # A slash pattern also matches everything below a matching dir.
            if fnmatch.fnmatch(rel, pattern) or fnmatch.fnmatch(rel, pattern + "/*"):
                return True
        return False

    def describe(self) -> List[str]:
        return sorted(self.ext_set) + self.name_patterns + \
            [p + "/" for p in self.dir_patterns] + self.path_patterns


class PatternSet:
    def __init__(
        self,
        includes: Optional[Iterable[str]] = None,
        excludes: Optional[Iterable[str]] = None,
        default_excludes: bool = True,
    ) -> None:
        self._includes = _Rules(includes or [])
        self._excludes = _Rules(excludes or [])
        self._default_excludes = default_excludes

    # ── Public API ────────────────────────────────────────────────────────────

    def is_empty(self) -> bool:
        return self._includes.is_empty() and self._excludes.is_empty()

    def is_selected(self, rel_path: PurePath) -> bool:
        """Return True if the file at rel_path (relative to the source root) is a candidate."""
        if self._default_excludes and _is_hidden(rel_path):
            return False
        if self._excludes.matches(rel_path):
            return False
        if self._includes.is_empty():
            return True
        return self._includes.matches(rel_path)

    def describe(self) -> str:
        """Human-readable summary of active rules."""
        parts = []
        if not self._includes.is_empty():
            parts.append("includes: " + ", ".join(self._includes.describe()))
        if not self._excludes.is_empty():
            parts.append("excludes: " + ", ".join(self._excludes.describe()))
        return "; ".join(parts) if parts else "none"


def _is_hidden(path: PurePath) -> bool:
    return any(part.startswith(".") for part in path.parts)


# ── Loaders ───────────────────────────────────────────────────────────────────

def load_pattern_file(path) -> List[str]:
    """Read patterns from a file, stripping comments and blank lines."""
    lines: List[str] = []
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                stripped = line.strip()
                if stripped and not stripped.startswith("#"):
                    lines.append(stripped)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not read pattern file {path}: {e}")
    return lines
