"""缓存文档模型

持久化单元 CacheDocument 及其中的 ColorAssignment。
序列化为规范 JSON（sorted keys, indent=2），相同文档产生相同字节。
"""

import json
import re
import secrets

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .. import config
from ..errors import CacheUnreadable

_DIGITS_RE = re.compile(r"(\d+)")


def natural_key(pane_id: str) -> tuple:
    """自然排序 key："%2" 排在 "%10" 之前"""
    return tuple(
        int(part) if i % 2 else part for i, part in enumerate(_DIGITS_RE.split(pane_id))
    )


def new_seed() -> int:
    """生成新的 startup_seed"""
    return secrets.randbits(63)


class ColorAssignment(BaseModel):
    """单个 pane 的颜色分配，pane 存活期间不可变"""

    model_config = ConfigDict(frozen=True)

    pane_id: str
    hue: float = Field(ge=0.0, lt=360.0)
    saturation: float = Field(ge=config.SATURATION_RANGE[0], le=config.SATURATION_RANGE[1])
    lightness: float = Field(ge=config.LIGHTNESS_RANGE[0], le=config.LIGHTNESS_RANGE[1])
    rank: int = Field(default=0, ge=0)  # 在本缓存中的出现名次


class CacheDocument(BaseModel):
    """颜色缓存文档

    Attributes:
        version: schema 版本
        startup_seed: 分配器 tie-break 和 pastel 抽样的种子
        opacity: 写入时使用的不透明度
        assignments: {pane_id: ColorAssignment}
    """

    model_config = ConfigDict(frozen=True)

    version: int = config.CACHE_VERSION
    startup_seed: int = Field(ge=0)
    opacity: float = Field(default=config.DEFAULT_OPACITY, ge=0.0, le=1.0)
    assignments: dict[str, ColorAssignment] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_keys(self) -> "CacheDocument":
        for key, assignment in self.assignments.items():
            if key != assignment.pane_id:
                raise ValueError(f"assignment key {key!r} != pane_id {assignment.pane_id!r}")
        return self

    @classmethod
    def fresh(cls, opacity: float | None = None) -> "CacheDocument":
        """创建空文档（新 seed）"""
        return cls(
            startup_seed=new_seed(),
            opacity=config.DEFAULT_OPACITY if opacity is None else opacity,
        )

    def hues(self) -> list[float]:
        return [a.hue for a in self.assignments.values()]

    def next_rank(self) -> int:
        if not self.assignments:
            return 0
        return max(a.rank for a in self.assignments.values()) + 1

    def sorted_assignments(self) -> list[ColorAssignment]:
        return [self.assignments[k] for k in sorted(self.assignments, key=natural_key)]

    def to_json(self) -> str:
        """规范 JSON 文本"""
        data = self.model_dump(mode="json")
        return json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True) + "\n"

    @classmethod
    def from_json(cls, text: str | bytes) -> "CacheDocument":
        """解析缓存文本

        Raises:
            CacheUnreadable: JSON 无效、版本不匹配或字段非法
        """
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CacheUnreadable("json", str(e)) from e

        if not isinstance(data, dict):
            raise CacheUnreadable("schema", "top-level value is not an object")

        file_version = data.get("version", config.CACHE_VERSION)
        if file_version != config.CACHE_VERSION:
            raise CacheUnreadable(
                "version", f"file={file_version}, expected={config.CACHE_VERSION}"
            )

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise CacheUnreadable("schema", str(e)) from e
