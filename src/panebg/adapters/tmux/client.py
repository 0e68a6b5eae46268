"""Tmux client for subprocess-based tmux interaction."""

import asyncio

from panebg import config
from panebg.telemetry import get_logger

logger = get_logger(__name__)

# Use tab as delimiter to avoid conflicts with spaces/colons in data
_FIELD_SEP = "\t"

_PANE_FORMAT = _FIELD_SEP.join([
    "#{pane_id}", "#{window_id}", "#{pane_left}", "#{pane_top}",
    "#{pane_width}", "#{pane_height}", "#{pane_active}",
])


class TmuxClient:
    """Client for interacting with tmux via subprocess commands.

    Provides async methods for:
    - Listing panes of the current window or of every session
    - Checking for a running session
    - Locating the attached client process
    - Installing global hooks
    """

    def __init__(self, socket_path: str | None = None):
        """Initialize TmuxClient.

        Args:
            socket_path: Optional tmux socket path. If None, uses default socket.
        """
        self._socket_path = socket_path

    async def run(self, *args: str) -> str | None:
        """Execute a tmux command.

        Args:
            *args: Command arguments (e.g., "list-panes", "-a", "-F", "...")

        Returns:
            Command stdout on success, None on failure.
        """
        cmd = ["tmux"]
        if self._socket_path:
            cmd.extend(["-S", self._socket_path])
        cmd.extend(args)

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()

            if proc.returncode != 0:
                logger.warning(f"[Tmux] Command failed: {' '.join(cmd)}: {stderr.decode().strip()}")
                return None

            return stdout.decode()

        except Exception as e:
            logger.error(f"[Tmux] Subprocess error: {e}")
            return None

    async def list_panes(self, all_panes: bool = False) -> list[dict]:
        """List tmux panes.

        Args:
            all_panes: List panes of every session instead of the current window.

        Returns:
            List of pane dicts with keys:
            - pane_id: str (e.g., "%0")
            - window_id: str (e.g., "@1")
            - x, y: int (character position)
            - width, height: int (characters)
            - active: bool
        """
        args = ["list-panes"]
        if all_panes:
            args.append("-a")
        output = await self.run(*args, "-F", _PANE_FORMAT)

        if not output:
            return []

        panes = []
        for line in output.strip().split("\n"):
            if not line.strip():
                continue
            parts = line.split(_FIELD_SEP)
            if len(parts) != 7:
                logger.warning(f"[Tmux] Unexpected pane line: {line!r}")
                continue
            try:
                panes.append(
                    {
                        "pane_id": parts[0],
                        "window_id": parts[1],
                        "x": int(parts[2]),
                        "y": int(parts[3]),
                        "width": int(parts[4]),
                        "height": int(parts[5]),
                        "active": parts[6] == "1",
                    }
                )
            except ValueError as e:
                logger.warning(f"[Tmux] Failed to parse pane line: {line!r}: {e}")

        return panes

    async def has_session(self) -> bool:
        """Check whether a tmux session is reachable.

        Returns:
            True if `display-message` succeeds.
        """
        output = await self.run("display-message", "-p", "#{session_name}")
        return output is not None

    async def get_client_pid(self) -> int | None:
        """PID of the tmux client attached to the current session.

        Falls back to the first listed client when none matches.

        Returns:
            Client PID, or None if no client is attached.
        """
        session_id = await self.run("display-message", "-p", "#{session_id}")
        session_id = session_id.strip() if session_id else None

        output = await self.run("list-clients", "-F", f"#{{client_pid}}{_FIELD_SEP}#{{session_id}}")
        if not output:
            return None

        first: int | None = None
        for line in output.strip().split("\n"):
            parts = line.split(_FIELD_SEP)
            if len(parts) != 2 or not parts[0].isdigit():
                continue
            pid = int(parts[0])
            if session_id and parts[1] == session_id:
                return pid
            if first is None:
                first = pid
        return first

    async def set_hook(self, hook_name: str, command: str) -> bool:
        """Set a global tmux hook.

        Args:
            hook_name: Hook name (e.g., "after-split-window")
            command: tmux command to run

        Returns:
            True on success, False on failure.
        """
        result = await self.run("set-hook", "-g", hook_name, command)
        return result is not None

    async def install_hooks(
        self, program_path: str, hooks: tuple[str, ...] = config.TMUX_HOOKS
    ) -> tuple[list[str], list[str]]:
        """Install hooks that regenerate the background on layout changes.

        Args:
            program_path: Executable invoked by the hooks
            hooks: Hook names to install

        Returns:
            (installed, failed) hook names
        """
        command = f"run-shell '{program_path} set-background >/dev/null 2>&1'"
        installed: list[str] = []
        failed: list[str] = []
        for hook_name in hooks:
            if await self.set_hook(hook_name, command):
                installed.append(hook_name)
            else:
                failed.append(hook_name)
        return installed, failed
