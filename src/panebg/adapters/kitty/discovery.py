"""Kitty 实例发现

查找顺序：
1. $KITTY_LISTEN_ON
2. $KITTY_PID（确认是 kitty 进程）
3. 在 tmux 中：从 tmux client 进程沿父进程链向上查找 kitty

找到 PID 后使用约定的 socket：unix:/tmp/kitty-{pid}
"""

import os
from pathlib import Path

from panebg import config
from panebg.adapters.tmux.client import TmuxClient
from panebg.telemetry import get_logger, metrics

logger = get_logger(__name__)


def is_kitty_process(pid: int, proc_root: Path = config.PROC_ROOT) -> bool:
    """命令行包含 kitty（排除本程序自身）"""
    try:
        cmdline = (proc_root / str(pid) / "cmdline").read_bytes()
    except OSError:
        return False
    cmd = cmdline.replace(b"\0", b" ").decode("utf-8", errors="replace")
    return "kitty" in cmd and "kitty-pane-bg" not in cmd


def get_parent_pid(pid: int, proc_root: Path = config.PROC_ROOT) -> int | None:
    """从 /proc/PID/stat 读取父进程 PID，到达 init 时返回 None"""
    try:
        stat = (proc_root / str(pid) / "stat").read_text()
    except OSError:
        return None
    # comm 可能含空格和括号，从最后一个 ')' 之后解析
    fields = stat.rpartition(")")[2].split()
    if len(fields) < 2 or not fields[1].isdigit():
        return None
    ppid = int(fields[1])
    return ppid if ppid > 1 else None


def find_kitty_in_process_tree(
    start_pid: int,
    proc_root: Path = config.PROC_ROOT,
    max_depth: int = config.PROCESS_TREE_MAX_DEPTH,
) -> int | None:
    """沿父进程链向上查找 kitty

    Returns:
        kitty PID，未找到返回 None
    """
    visited: set[int] = set()
    pid: int | None = start_pid
    for _ in range(max_depth):
        if pid is None or pid in visited:
            break
        visited.add(pid)
        if is_kitty_process(pid, proc_root):
            return pid
        pid = get_parent_pid(pid, proc_root)
    return None


async def discover_kitty_pid(
    environ: dict[str, str] | None = None,
    tmux: TmuxClient | None = None,
    proc_root: Path = config.PROC_ROOT,
) -> int | None:
    """查找当前终端所属的 kitty 进程

    Args:
        environ: 环境变量，默认 os.environ
        tmux: 查询 client PID 用的 TmuxClient
        proc_root: /proc 挂载点

    Returns:
        kitty PID，未找到返回 None
    """
    env = os.environ if environ is None else environ

    kitty_pid = env.get("KITTY_PID")
    if kitty_pid and kitty_pid.isdigit():
        pid = int(kitty_pid)
        # 没有 /proc 时无法验证，直接信任
        if not proc_root.is_dir() or is_kitty_process(pid, proc_root):
            metrics.inc("kitty.discovered", {"method": "env"})
            return pid
        logger.debug(f"[Kitty] KITTY_PID={pid} is not a kitty process")

    if env.get("TMUX"):
        tmux = tmux or TmuxClient()
        client_pid = await tmux.get_client_pid()
        if client_pid is None:
            logger.debug("[Kitty] No tmux client attached")
            return None
        pid = find_kitty_in_process_tree(client_pid, proc_root)
        if pid is not None:
            logger.debug(f"[Kitty] Found kitty {pid} above tmux client {client_pid}")
            metrics.inc("kitty.discovered", {"method": "process_tree"})
            return pid
        logger.debug(f"[Kitty] No kitty above tmux client {client_pid}")

    return None


async def discover_target(
    environ: dict[str, str] | None = None,
    tmux: TmuxClient | None = None,
    proc_root: Path = config.PROC_ROOT,
    socket_dir: Path = config.KITTY_SOCKET_DIR,
) -> str | None:
    """Find the remote-control address of the surrounding kitty.

    Returns:
        Address for `--to`, or None to let kitten use its own defaults.
    """
    env = os.environ if environ is None else environ
    listen_on = env.get("KITTY_LISTEN_ON")
    if listen_on:
        return listen_on

    pid = await discover_kitty_pid(env, tmux, proc_root)
    if pid is None:
        return None

    socket_path = socket_dir / f"kitty-{pid}"
    if not socket_path.exists():
        logger.info(f"[Kitty] Socket {socket_path} not found for kitty {pid}")
        return None
    return f"unix:{socket_path}"
