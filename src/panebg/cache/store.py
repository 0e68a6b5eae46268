"""颜色缓存存储

生命周期（每次渲染）：
    with store.locked():
        doc = store.load()
        doc, new = store.reconcile(doc, live_ids)
        store.save(doc)

- load(): 缺失或损坏的文件视为空缓存，不会失败
- reconcile(): 驱逐不存活的 pane，为新 pane 分配颜色
- save(): 原子写入（temp + rename），规范 JSON
- locked(): 文件锁保护 load → reconcile → save，任何退出路径都释放
"""

import fcntl
import os
import tempfile
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from .. import config
from ..color.allocator import HueAllocator, draw_envelope
from ..errors import CacheUnreadable, PersistenceWriteFailure
from ..telemetry import format_pane_log, get_logger, metrics
from .document import CacheDocument, ColorAssignment, natural_key, new_seed

logger = get_logger(__name__)


class ColorCacheStore:
    """颜色缓存存储

    每次渲染构造一个实例并显式传递，不使用全局状态。
    """

    def __init__(
        self,
        path: Path | None = None,
        allocator: HueAllocator | None = None,
        default_opacity: float = config.DEFAULT_OPACITY,
    ):
        """
        Args:
            path: 缓存文件路径，默认 config.CACHE_FILE
            allocator: 色相分配器，默认使用 SEEDED_PERMUTATION 策略
            default_opacity: 新文档的默认不透明度
        """
        self._path = Path(path) if path else config.CACHE_FILE
        self._allocator = allocator or HueAllocator()
        self._default_opacity = default_opacity

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lock_path(self) -> Path:
        return self._path.with_suffix(".lock")

    @contextmanager
    def locked(self) -> Iterator[None]:
        """独占文件锁

        同一进程内不可嵌套（clear/remove 自带锁）。

        Raises:
            PersistenceWriteFailure: 缓存目录或锁文件不可写
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            lock_file = open(self.lock_path, "a", encoding="utf-8")
        except OSError as e:
            metrics.inc("cache.lock_error")
            raise PersistenceWriteFailure(f"cannot lock {self.lock_path}: {e}") from e

        with lock_file:
            try:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            except OSError as e:
                metrics.inc("cache.lock_error")
                raise PersistenceWriteFailure(f"cannot lock {self.lock_path}: {e}") from e
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def load(self) -> CacheDocument:
        """读取缓存文档，缺失或损坏时返回新文档"""
        if not self._path.exists():
            logger.debug(f"[Cache] File not found: {self._path}")
            return CacheDocument.fresh(self._default_opacity)

        try:
            content = self._path.read_bytes()
            doc = CacheDocument.from_json(content)
        except CacheUnreadable as e:
            logger.warning(f"[Cache] Unreadable cache {self._path}, starting fresh: {e}")
            metrics.inc("cache.load_error", {"reason": e.reason})
            return CacheDocument.fresh(self._default_opacity)
        except OSError as e:
            logger.warning(f"[Cache] Cannot read {self._path}, starting fresh: {e}")
            metrics.inc("cache.load_error", {"reason": "io"})
            return CacheDocument.fresh(self._default_opacity)

        logger.debug(f"[Cache] Loaded {len(doc.assignments)} assignments")
        return doc

    def reconcile(
        self, doc: CacheDocument, live_pane_ids: Iterable[str]
    ) -> tuple[CacheDocument, set[str]]:
        """将缓存与存活 pane 集合对齐

        先驱逐，再为新 pane 依次分配（新 pane 之间也互相避让）。
        输入文档不被修改。

        Args:
            doc: 当前文档
            live_pane_ids: 存活 pane ID

        Returns:
            (新文档, 本次新分配颜色的 pane ID 集合)
        """
        live = set(live_pane_ids)
        survivors = {pid: a for pid, a in doc.assignments.items() if pid in live}

        evicted = sorted(set(doc.assignments) - live, key=natural_key)
        for pane_id in evicted:
            logger.debug(format_pane_log("Cache", pane_id, "evicted"))
        if evicted:
            metrics.inc("cache.evicted", value=len(evicted))

        hues = [a.hue for a in survivors.values()]
        rank = doc.next_rank()
        newly_assigned: set[str] = set()

        for pane_id in sorted(live - survivors.keys(), key=natural_key):
            allocation = self._allocator.allocate(hues, doc.startup_seed)
            saturation, lightness = draw_envelope(doc.startup_seed, rank)
            survivors[pane_id] = ColorAssignment(
                pane_id=pane_id,
                hue=allocation.hue,
                saturation=saturation,
                lightness=lightness,
                rank=rank,
            )
            logger.debug(
                format_pane_log(
                    "Cache",
                    pane_id,
                    f"assigned hue={allocation.hue:.1f} via {allocation.slot.value} "
                    f"(min distance {allocation.min_distance:.1f})",
                )
            )
            hues.append(allocation.hue)
            newly_assigned.add(pane_id)
            rank += 1

        if newly_assigned:
            metrics.inc("cache.assigned", value=len(newly_assigned))

        ordered = {pid: survivors[pid] for pid in sorted(survivors, key=natural_key)}
        return doc.model_copy(update={"assignments": ordered}), newly_assigned

    def save(self, doc: CacheDocument) -> None:
        """原子写入缓存文档

        Raises:
            PersistenceWriteFailure: 写入失败
        """
        data = doc.to_json().encode("utf-8")

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                prefix="pane_colors_", suffix=".tmp", dir=self._path.parent
            )
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(temp_path, self._path)
            except BaseException:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
                raise
        except OSError as e:
            metrics.inc("cache.save_error")
            raise PersistenceWriteFailure(f"cannot write {self._path}: {e}") from e

        logger.debug(f"[Cache] Saved {len(doc.assignments)} assignments")

    def clear(self) -> CacheDocument:
        """清空所有分配并重新生成 seed

        Raises:
            PersistenceWriteFailure: 写入失败
        """
        with self.locked():
            doc = self.load()
            cleared = doc.model_copy(update={"assignments": {}, "startup_seed": new_seed()})
            self.save(cleared)
        logger.info(f"[Cache] Cleared {len(doc.assignments)} assignments")
        return cleared

    def remove(self, pane_id: str) -> bool:
        """移除单个 pane 的分配（不检查存活）

        Returns:
            是否找到并移除
        """
        with self.locked():
            doc = self.load()
            if pane_id not in doc.assignments:
                return False
            remaining = {k: v for k, v in doc.assignments.items() if k != pane_id}
            self.save(doc.model_copy(update={"assignments": remaining}))
        logger.info(format_pane_log("Cache", pane_id, "removed"))
        return True
