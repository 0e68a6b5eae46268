"""Image output helpers."""

import os
import tempfile
import time
from pathlib import Path

from PIL import Image

from panebg import config
from panebg.errors import ImageWriteFailure, InvalidConfiguration

_SUPPORTED_SUFFIXES = {".png"}


def validate_output_path(output_path: str | Path) -> Path:
    """Check the output path names a PNG file.

    Raises:
        InvalidConfiguration: for unsupported extensions
    """
    path = Path(output_path)
    if path.suffix.lower() not in _SUPPORTED_SUFFIXES:
        raise InvalidConfiguration(f"Unsupported image format: {path.suffix or '(none)'}")
    return path


def write_png(image: Image.Image, output_path: str | Path) -> Path:
    """Encode image as PNG and write it atomically (temp + rename).

    The temp file is unique per call, so concurrent writers never share it.

    Raises:
        ImageWriteFailure: if encoding or writing fails
    """
    path = validate_output_path(output_path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".png", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                image.save(f, format="PNG")
            os.replace(temp_path, path)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
    except (OSError, ValueError) as e:
        raise ImageWriteFailure(f"Failed to write image {path}: {e}") from e

    if path.stat().st_size == 0:
        raise ImageWriteFailure(f"Generated image file is empty: {path}")
    return path


def unique_output_path(directory: Path = config.TEMP_OUTPUT_DIR, label: str = "temp") -> Path:
    """Per-process temporary image path, e.g. /tmp/kitty-pane-bg-temp-123-1700000000.png"""
    name = f"{config.TEMP_OUTPUT_PREFIX}-{label}-{os.getpid()}-{time.time_ns()}.png"
    return directory / name
