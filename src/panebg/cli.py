"""kitty-pane-bg 命令行入口

子命令：
- generate: 根据当前 pane 布局生成背景图
- set-background / auto: 生成并设为 kitty 背景
- install-hooks: 安装 tmux hook，布局变化时自动生成
- check: 检查 tmux / kitty 环境
- clear: 清除 kitty 背景
- cache show|clear|remove: 查看和维护颜色缓存

退出码：0 成功；1 未生成任何结果或配置错误；2 图片已生成但缓存未保存
"""

import argparse
import asyncio
import os
import shutil
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from . import config
from .adapters.kitty import KittyBackgroundSink, KittyClient, KittyGeometrySource
from .adapters.tmux import TmuxClient, TmuxPaneSource
from .cache import ColorCacheStore
from .color.space import rgb_to_hex, to_rgb
from .errors import ImageWriteFailure, InvalidConfiguration, PersistenceWriteFailure
from .render import RenderPipeline, RenderResult
from .render.output import unique_output_path
from .telemetry import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CACHE_NOT_SAVED = 2

console = Console()
err_console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kitty-pane-bg",
        description="Generate pane background images using kitty and tmux",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument(
        "--cache-file", type=Path, default=None, help=f"Color cache file (default: {config.CACHE_FILE})"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate background image based on current pane layout")
    gen.add_argument("-o", "--output", default=config.DEFAULT_OUTPUT, help="Output image path")
    _add_render_options(gen)

    for name, help_text in (
        ("set-background", "Generate and set as kitty background"),
        ("auto", "Alias for set-background"),
    ):
        bg = sub.add_parser(name, help=help_text)
        bg.add_argument(
            "--keep-file", action="store_true", help="Keep the generated image file"
        )
        _add_render_options(bg)

    sub.add_parser("install-hooks", help="Install tmux hooks")
    sub.add_parser("check", help="Check if running in tmux and kitty")
    sub.add_parser("clear", help="Clear kitty background")

    cache = sub.add_parser("cache", help="Manage color cache")
    cache_sub = cache.add_subparsers(dest="action", required=True)
    cache_sub.add_parser("show", help="Show current color cache")
    cache_sub.add_parser("clear", help="Clear all cached colors")
    remove = cache_sub.add_parser("remove", help="Remove specific pane color")
    remove.add_argument("pane_id")

    return parser


def _add_render_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-a", "--all-panes", action="store_true",
        help="Use all panes across sessions (default: current window only)",
    )
    parser.add_argument(
        "--opacity", type=float, default=None,
        help=f"Pane fill opacity in [0, 1] (default: cached value or {config.DEFAULT_OPACITY})",
    )


def make_store(args: argparse.Namespace) -> ColorCacheStore:
    return ColorCacheStore(path=args.cache_file)


def make_pipeline(args: argparse.Namespace) -> RenderPipeline:
    return RenderPipeline(
        pane_source=TmuxPaneSource(all_panes=args.all_panes),
        geometry_source=KittyGeometrySource(),
        store=make_store(args),
    )


def _report(result: RenderResult) -> None:
    width, height = result.canvas_size
    note = " [dim](estimated size, kitty remote control unavailable)[/dim]" if result.estimated else ""
    console.print(f"Rendered {result.pane_count} panes at {width}x{height}{note}")
    if result.newly_assigned:
        console.print(f"New colors: {', '.join(sorted(result.newly_assigned))}")


async def _render(args: argparse.Namespace, output: str | Path) -> tuple[int, RenderResult | None]:
    if not await TmuxClient().has_session():
        err_console.print("Not running in a tmux session. Please start tmux first.")
        return EXIT_FAILED, None

    try:
        result = await make_pipeline(args).render(output, opacity=args.opacity)
    except InvalidConfiguration as e:
        err_console.print(f"Invalid configuration: {e}")
        return EXIT_FAILED, None
    except ImageWriteFailure as e:
        err_console.print(f"Nothing produced: {e}")
        return EXIT_FAILED, None

    _report(result)
    if not result.cache_saved:
        err_console.print(
            f"Image produced at {result.output_path}, but color cache not saved: {result.cache_error}"
        )
        return EXIT_CACHE_NOT_SAVED, result
    return EXIT_OK, result


async def cmd_generate(args: argparse.Namespace) -> int:
    code, result = await _render(args, args.output)
    if result is not None:
        console.print(f"Wrote {result.output_path}")
    return code


async def cmd_set_background(args: argparse.Namespace) -> int:
    output = unique_output_path(label=args.command)
    code, result = await _render(args, output)
    if result is None:
        return code

    sink = KittyBackgroundSink()
    if await sink.set_background(str(result.output_path)):
        console.print("Set pane layout as kitty background")
    else:
        err_console.print("Failed to set kitty background; check kitty remote control setup")
        err_console.print(f"The image was still generated at: {result.output_path}")
        return EXIT_FAILED

    if args.keep_file:
        console.print(f"Keeping generated file: {result.output_path}")
    else:
        try:
            os.unlink(result.output_path)
        except OSError as e:
            logger.warning(f"Failed to remove temp file {result.output_path}: {e}")
    return code


def _program_path() -> str:
    found = shutil.which("kitty-pane-bg")
    if found:
        return found
    return str(Path(sys.argv[0]).resolve())


async def cmd_install_hooks(args: argparse.Namespace) -> int:
    installed, failed = await TmuxClient().install_hooks(_program_path())
    for hook in installed:
        console.print(f"[green]✓[/green] Installed tmux hook: {hook}")
    for hook in failed:
        err_console.print(f"[yellow]![/yellow] Failed to set hook: {hook}")
    console.print(f"Installed {len(installed)} hooks, {len(failed)} failed")
    return EXIT_OK if installed else EXIT_FAILED


async def cmd_check(args: argparse.Namespace) -> int:
    tmux = TmuxClient()
    in_tmux = await tmux.has_session()
    console.print(f"Tmux session: {'[green]found[/green]' if in_tmux else '[red]not found[/red]'}")

    kitty = KittyClient(tmux=tmux)
    target = await kitty.resolve_target()
    console.print(f"Kitty remote target: {target or '(default)'}")
    geometry = await KittyGeometrySource(kitty).get_window_geometry()
    if geometry is None:
        console.print("Kitty remote control: [red]unavailable[/red] (falling back to default cell size)")
    else:
        console.print(
            f"Kitty window: {geometry.width}x{geometry.height} "
            f"(cell {geometry.cell_width:.1f}x{geometry.cell_height:.1f})"
        )

    if in_tmux:
        panes = await TmuxPaneSource(tmux).list_panes()
        console.print(f"Tmux panes: {len(panes)}")
        return EXIT_OK

    err_console.print("Please start a tmux session first")
    return EXIT_FAILED


async def cmd_clear(args: argparse.Namespace) -> int:
    if await KittyBackgroundSink().clear_background():
        console.print("Cleared kitty background")
        return EXIT_OK
    err_console.print("Failed to clear kitty background; check kitty remote control setup")
    return EXIT_FAILED


def cmd_cache(args: argparse.Namespace) -> int:
    store = make_store(args)

    if args.action == "show":
        doc = store.load()
        console.print(f"Cache file: {store.path}")
        console.print(f"Startup seed: {doc.startup_seed}")
        console.print(f"Opacity: {doc.opacity:.2f}")
        console.print(f"Cached panes: {len(doc.assignments)}")
        if not doc.assignments:
            console.print("No colors cached yet.")
            return EXIT_OK

        table = Table("Pane", "Color", "Hue", "Sat", "Light", "Rank")
        for a in doc.sorted_assignments():
            hex_color = rgb_to_hex(to_rgb(a.hue, a.saturation, a.lightness))
            swatch = Text(f" {hex_color} ", style=f"black on {hex_color}")
            table.add_row(
                a.pane_id, swatch, f"{a.hue:.1f}°", f"{a.saturation:.2f}",
                f"{a.lightness:.2f}", str(a.rank),
            )
        console.print(table)
        return EXIT_OK

    if args.action == "clear":
        store.clear()
        console.print("Color cache cleared")
        return EXIT_OK

    if store.remove(args.pane_id):
        console.print(f"Removed color for pane: {args.pane_id}")
    else:
        console.print(f"Pane {args.pane_id} not found in cache.")
    return EXIT_OK


_ASYNC_COMMANDS = {
    "generate": cmd_generate,
    "set-background": cmd_set_background,
    "auto": cmd_set_background,
    "install-hooks": cmd_install_hooks,
    "check": cmd_check,
    "clear": cmd_clear,
}


def main(argv: list[str] | None = None) -> int:
    """入口函数"""
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    try:
        if args.command == "cache":
            return cmd_cache(args)
        return asyncio.run(_ASYNC_COMMANDS[args.command](args))
    except PersistenceWriteFailure as e:
        err_console.print(f"Color cache not saved: {e}")
        return EXIT_CACHE_NOT_SAVED
    except KeyboardInterrupt:
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
