"""OSC 20 background escape sequences.

Used when kitty remote control is unavailable. Inside tmux the sequence
is wrapped in a DCS passthrough so tmux forwards it to the outer terminal
(requires `set -g allow-passthrough on`).
"""

import base64
from pathlib import Path

from panebg import config
from panebg.telemetry import get_logger

logger = get_logger(__name__)

ESC = "\x1b"
ST = f"{ESC}\\"


def encode_image(image_path: str | Path) -> str:
    """Base64 payload of an image file.

    Raises:
        OSError: if the file cannot be read
    """
    return base64.b64encode(Path(image_path).read_bytes()).decode("ascii")


def osc20(payload: str) -> str:
    """OSC 20 background sequence; an empty payload clears the background."""
    return f"{ESC}]20;{payload}{ST}"


def tmux_passthrough(sequence: str) -> str:
    """Wrap a sequence in tmux DCS passthrough (inner ESC doubled)."""
    return f"{ESC}Ptmux;{sequence.replace(ESC, ESC + ESC)}{ST}"


def background_sequence(payload: str, in_tmux: bool) -> str:
    sequence = osc20(payload)
    return tmux_passthrough(sequence) if in_tmux else sequence


def write_tty(sequence: str, tty_path: Path = config.TTY_PATH) -> bool:
    """Write an escape sequence to the controlling terminal.

    Returns:
        True on success, False if the terminal cannot be opened.
    """
    try:
        with open(tty_path, "w", encoding="ascii") as tty:
            tty.write(sequence)
            tty.flush()
    except OSError as e:
        logger.warning(f"[Kitty] Cannot write escape sequence to {tty_path}: {e}")
        return False
    return True
