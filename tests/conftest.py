"""
Shared fixtures for the pngquant-task test suite.
"""
import os
import stat
import sys
from pathlib import Path

import pytest

from config import TaskConfig


# ── File-creation helpers ─────────────────────────────────────────────────────

def make_file(path: Path, content: bytes = b"dummy content") -> Path:
    """Create a file with the given content; create parent dirs as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def make_png(path: Path, content: bytes = b"fake png data") -> Path:
    return make_file(path, content)


def set_mtime(path: Path, mtime: float) -> Path:
    os.utime(path, (mtime, mtime))
    return path


# ── Fake quantization command ─────────────────────────────────────────────────
#
# Run without arguments it prints a banner and exits with probe_exit.
# Run as "<tool> COLORS INPUT" it reacts to the first bytes of INPUT:
#   STDERR  writes output, complains on stderr, exits 0
#   EXIT    exits 2 without output
#   EMPTY   writes a zero-byte output file
#   NONE    writes nothing, exits 0
#   HANG    sleeps well past any test timeout
#   other   writes b"quantized:<COLORS>:" + INPUT to <stem>-fs8.png

FAKE_TOOL_TEMPLATE = '''#!{python}
import sys
import time

BANNER = {banner!r}
PROBE_EXIT = {probe_exit!r}
PROBE_STREAM = {probe_stream!r}

if len(sys.argv) == 1:
    if PROBE_STREAM == "hang":
        time.sleep(30)
    stream = sys.stderr if PROBE_STREAM == "stderr" else sys.stdout
    stream.write(BANNER)
    stream.flush()
    sys.exit(PROBE_EXIT)

colors, input_path = sys.argv[1], sys.argv[2]
output_path = input_path[:-4] + "-fs8.png"
with open(input_path, "rb") as f:
    data = f.read()

if data.startswith(b"HANG"):
    time.sleep(30)
    sys.exit(0)
if data.startswith(b"EXIT"):
    sys.stderr.write("error: cannot decode image\\n")
    sys.exit(2)
if data.startswith(b"NONE"):
    sys.exit(0)
with open(output_path, "wb") as f:
    if not data.startswith(b"EMPTY"):
        f.write(b"quantized:" + colors.encode() + b":" + data)
if data.startswith(b"STDERR"):
    sys.stderr.write("libpng error: Not a PNG file\\n")
sys.exit(0)
'''

PNGQUANT_BANNER = (
    "pngquant, 2.12.0 (January 2018), by Kornel Lesinski, Greg Roelofs.\n"
    "usage:  pngquant [options] [ncolors] -- pngfile [pngfile ...]\n"
)


def write_fake_tool(
    path: Path,
    banner: str = PNGQUANT_BANNER,
    probe_exit: int = 1,
    probe_stream: str = "stderr",
) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(FAKE_TOOL_TEMPLATE.format(
        python=sys.executable,
        banner=banner,
        probe_exit=probe_exit,
        probe_stream=probe_stream,
    ))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def src(tmp_path: Path) -> Path:
    """Empty source directory."""
    d = tmp_path / "source"
    d.mkdir()
    return d


@pytest.fixture
def tgt(tmp_path: Path) -> Path:
    """Empty destination directory."""
    d = tmp_path / "target"
    d.mkdir()
    return d


@pytest.fixture
def work(tmp_path: Path) -> Path:
    """Private temp directory for intermediate files."""
    d = tmp_path / "work"
    d.mkdir()
    return d


@pytest.fixture
def fake_tool(tmp_path: Path) -> str:
    """A well-behaved fake pngquant."""
    return write_fake_tool(tmp_path / "bin" / "pngquant")


@pytest.fixture
def missing_tool(tmp_path: Path) -> str:
    return str(tmp_path / "bin" / "does-not-exist")


@pytest.fixture
def task_config(src: Path, tgt: Path, work: Path, fake_tool: str) -> TaskConfig:
    return TaskConfig(
        source_dir=src,
        dest_dir=tgt,
        command=fake_tool,
        colors=64,
        timeout_ms=10_000,
        process="true",
        temp_dir=work,
        use_progress=False,
    )
