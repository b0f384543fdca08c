import logging
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

OUTPUT_EXTENSION = ".png"

# pngquant writes "<stem>-fs8.png" next to its input by default.
QUANTIZED_SUFFIX = "-fs8.png"

TEMP_PREFIX = "PngquantTask"

_TRAILING_EXTENSION = re.compile(r"\.[a-zA-Z]+$")


def destination_name(rel_path: str) -> str:
    """
    Replace the trailing extension of rel_path with .png.
    Example: icons/Logo.PNG -> icons/Logo.png, README -> README.png
    """
    name, count = _TRAILING_EXTENSION.subn(OUTPUT_EXTENSION, rel_path)
    if count == 0:
        name = rel_path + OUTPUT_EXTENSION
    return name


def quantized_output_path(input_path: Path) -> Path:
    """
    Where the external tool leaves its result for input_path.
    Example: /tmp/PngquantTask1a2b.png -> /tmp/PngquantTask1a2b-fs8.png
    """
    return input_path.parent / (input_path.stem + QUANTIZED_SUFFIX)


def copy_file(source_path: Path, dest_path: Path) -> Path:
    """
    Create parent directories and copy source to dest byte for byte.
    The copy gets a fresh modification time so later runs see it as up to
    date. An existing destination is overwritten.
    Returns dest_path.
    """
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source_path, dest_path)
    return dest_path


def delete_file(path: Optional[Path]) -> bool:
    """
    Remove path if it exists. Failures are logged, never raised.
    Returns True if nothing is left at path afterwards.
    """
    if path is None:
        return True
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error(f"Failed to delete file \"{path}\": {e}")
        return False
    return True


def materialize_temp_input(
    source_path: Path,
    temp_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Copy source_path into a freshly created, uniquely named .png file in
    temp_dir (the system temp dir by default) and return its path.
    """
    fd, name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=OUTPUT_EXTENSION, dir=temp_dir)
    os.close(fd)
    temp_path = Path(name)
    try:
        shutil.copyfile(source_path, temp_path)
    except OSError:
        delete_file(temp_path)
        raise
    return temp_path
