"""Tmux pane source.

Converts tmux pane rows into PaneGeometry records keyed by a sanitized
"window:pane" identifier.
"""

from panebg.adapters.base import PaneSource
from panebg.models import PaneGeometry
from panebg.telemetry import get_logger

from .client import TmuxClient

logger = get_logger(__name__)

_MAX_ID_PART = 50
_ALLOWED_PUNCTUATION = "%@-_"


def sanitize_id(raw: str) -> str:
    """Keep alphanumerics and tmux sigils, truncated."""
    kept = [c for c in raw if c.isalnum() or c in _ALLOWED_PUNCTUATION]
    return "".join(kept[:_MAX_ID_PART])


def make_pane_key(window_id: str, pane_id: str) -> str:
    """Cache key of a pane, e.g. "@1:%3"."""
    return f"{sanitize_id(window_id)}:{sanitize_id(pane_id)}"


class TmuxPaneSource(PaneSource):
    """PaneSource backed by `tmux list-panes`."""

    name: str = "tmux"

    def __init__(
        self,
        client: TmuxClient | None = None,
        all_panes: bool = False,
        socket_path: str | None = None,
    ):
        """Initialize TmuxPaneSource.

        Args:
            client: TmuxClient to use (created from socket_path if None)
            all_panes: Include panes of every session, not just the current window
            socket_path: Optional tmux socket path
        """
        self._client = client or TmuxClient(socket_path=socket_path)
        self._all_panes = all_panes

    @property
    def client(self) -> TmuxClient:
        """Access underlying TmuxClient."""
        return self._client

    def build(self, rows: list[dict]) -> list[PaneGeometry]:
        """Build PaneGeometry records from TmuxClient.list_panes() rows.

        Rows with empty dimensions are skipped.
        """
        panes = []
        for row in rows:
            try:
                pane = PaneGeometry(
                    pane_id=make_pane_key(row["window_id"], row["pane_id"]),
                    left=int(row["x"]),
                    top=int(row["y"]),
                    width=int(row["width"]),
                    height=int(row["height"]),
                    is_active=bool(row.get("active", False)),
                    window_id=row["window_id"],
                )
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"[Tmux] Skipping malformed pane row {row!r}: {e}")
                continue
            if pane.width <= 0 or pane.height <= 0:
                logger.warning(f"[Tmux] Skipping pane {pane.pane_id} with size {pane.width}x{pane.height}")
                continue
            panes.append(pane)
        return panes

    async def list_panes(self) -> list[PaneGeometry]:
        rows = await self._client.list_panes(all_panes=self._all_panes)
        return self.build(rows)
