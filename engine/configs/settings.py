"""
引擎全局设置（单一真源）。

用法：
    from engine.configs.settings import settings
    max_box_size = settings.LAYOUT_REFLOW_MAX_BOX_SIZE

说明：
- 所有设置项均为大写类属性，带默认值；运行期通过 `settings.load(path)` 从 JSON 覆盖；
- 设置仅作为“调用入口的默认参数来源”，布局/回流算法本身不读取全局可变状态，
  需要的值由调用方（ReflowService.from_settings / UI 控制器）显式传入。
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from engine.utils.logging.logger import log_info, log_warn


class Settings:
    """引擎设置集合"""

    # ===== 动态高度回流（engine.layout.reflow） =====
    # 向下延伸包围盒的哨兵距离（行），需大于任何真实画布高度
    LAYOUT_REFLOW_MAX_BOX_SIZE: int = 20000
    # 参与重叠检测的控件数量上限；超过则放弃检测（0 表示不限制）
    LAYOUT_REFLOW_MAX_WIDGET_COUNT: int = 0
    # 重叠对数量上限；超过则放弃检测（0 表示不限制）
    LAYOUT_REFLOW_MAX_PAIR_COUNT: int = 0
    # 输出 ReflowService 的回流总耗时（info 级别）
    LAYOUT_REFLOW_TIMING_VERBOSE: bool = False
    # 输出每次回流的摘要（info 级别）
    LAYOUT_REFLOW_VERBOSE: bool = False

    _INT_KEYS: tuple[str, ...] = (
        "LAYOUT_REFLOW_MAX_BOX_SIZE",
        "LAYOUT_REFLOW_MAX_WIDGET_COUNT",
        "LAYOUT_REFLOW_MAX_PAIR_COUNT",
    )
    _BOOL_KEYS: tuple[str, ...] = (
        "LAYOUT_REFLOW_TIMING_VERBOSE",
        "LAYOUT_REFLOW_VERBOSE",
    )

    def __init__(self) -> None:
        self._config_path: Path | None = None

    @classmethod
    def defaults(cls) -> Dict[str, Any]:
        return {key: getattr(cls, key) for key in cls._INT_KEYS + cls._BOOL_KEYS}

    def reset(self) -> None:
        """恢复全部默认值（测试入口常用）。"""
        for key in self._INT_KEYS + self._BOOL_KEYS:
            if key in self.__dict__:
                delattr(self, key)
        self._config_path = None

    def update(self, values: Dict[str, Any]) -> None:
        """
        批量覆盖设置项。

        - 未知键：记录警告并忽略；
        - 类型/取值非法：直接抛 ValueError，不做静默修正。
        """
        validated: Dict[str, Any] = {}
        for key, value in values.items():
            if key in self._INT_KEYS:
                validated[key] = self._validate_int(key, value)
            elif key in self._BOOL_KEYS:
                if not isinstance(value, bool):
                    raise ValueError(f"settings.{key} 必须是 bool，当前={value!r}")
                validated[key] = value
            else:
                log_warn("[SETTINGS] 忽略未知设置项: {}", key)

        for key, value in validated.items():
            setattr(self, key, value)

    def load(self, config_path: Path) -> None:
        """从 JSON 文件加载设置覆盖；文件不存在时保持默认值。"""
        if not isinstance(config_path, Path):
            raise TypeError("config_path 必须是 pathlib.Path 实例")
        self._config_path = config_path
        if not config_path.exists():
            log_info("[SETTINGS] 未找到设置文件，使用默认值: {}", config_path)
            return
        raw = json.loads(config_path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"设置文件顶层必须是对象: {config_path}")
        self.update(raw)
        log_info("[SETTINGS] 已加载设置文件: {}", config_path)

    @property
    def config_path(self) -> Path | None:
        return self._config_path

    @staticmethod
    def _validate_int(key: str, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"settings.{key} 必须是 int，当前={value!r}")
        if key == "LAYOUT_REFLOW_MAX_BOX_SIZE":
            if value <= 0:
                raise ValueError(f"settings.{key} 必须 > 0，当前={value}")
        elif value < 0:
            raise ValueError(f"settings.{key} 必须 >= 0，当前={value}")
        return value


settings = Settings()
