"""Kitty remote-control client (`kitten @`)."""

import asyncio
import json

from panebg import config
from panebg.adapters.tmux.client import TmuxClient
from panebg.errors import GeometryUnavailable
from panebg.telemetry import get_logger

from .discovery import discover_target

logger = get_logger(__name__)


class KittyClient:
    """Client for kitty's remote control protocol.

    Provides async methods for:
    - Listing OS windows / tabs / windows (`ls`)
    - Setting and clearing the background image
    """

    def __init__(
        self,
        target: str | None = None,
        command: str = config.KITTY_COMMAND,
        tmux: TmuxClient | None = None,
    ):
        """Initialize KittyClient.

        Args:
            target: Remote-control address (`--to`). If None, discovered from
                the environment on first use.
            command: kitten executable
            tmux: TmuxClient used for process-tree discovery
        """
        self._target = target
        self._resolved = target is not None
        self._command = command
        self._tmux = tmux

    @property
    def target(self) -> str | None:
        return self._target

    async def resolve_target(self) -> str | None:
        """Discover the remote-control address once and remember it."""
        if not self._resolved:
            self._target = await discover_target(tmux=self._tmux)
            self._resolved = True
        return self._target

    async def run(self, *args: str) -> str | None:
        """Execute a `kitten @` command.

        Returns:
            Command stdout on success, None on failure.
        """
        target = await self.resolve_target()
        cmd = [self._command, "@"]
        if target:
            cmd.extend(["--to", target])
        cmd.extend(args)

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()

            if proc.returncode != 0:
                logger.warning(f"[Kitty] kitten command failed: {' '.join(cmd)}: {stderr.decode().strip()}")
                return None

            return stdout.decode()

        except Exception as e:
            logger.error(f"[Kitty] kitten subprocess error: {e}")
            return None

    async def ls(self) -> list[dict]:
        """List kitty OS windows.

        Returns:
            Parsed `kitten @ ls` JSON.

        Raises:
            GeometryUnavailable: if remote control is disabled or the output
                is not a JSON list
        """
        output = await self.run("ls")
        if output is None:
            raise GeometryUnavailable("kitty remote control is unavailable")
        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise GeometryUnavailable(f"invalid kitten @ ls output: {e}") from e
        if not isinstance(data, list):
            raise GeometryUnavailable("kitten @ ls did not return a list")
        return data

    async def set_background_image(self, image_path: str) -> bool:
        """Set the background image of all kitty windows.

        Returns:
            True on success, False on failure.
        """
        result = await self.run("set-background-image", "--all", image_path)
        return result is not None

    async def clear_background_image(self) -> bool:
        """Remove the background image.

        Returns:
            True on success, False on failure.
        """
        result = await self.run("set-background-image", "--all", "none")
        return result is not None
