"""持久化模块

两份 JSON 文档的 key-value 存储（layout / settings）：
- 原子写入（temp + rename），写入确认后才返回 True
- 加载失败（文件缺失、JSON 损坏、结构错误）回退到默认文档，从不抛出
- settings 加载时与默认值合并，补齐缺失 key
"""

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from .. import config
from ..telemetry import get_logger, metrics

logger = get_logger(__name__)

DEFAULTS: dict[str, dict] = {
    config.LAYOUT_KEY: config.DEFAULT_LAYOUT,
    config.SETTINGS_KEY: config.DEFAULT_SETTINGS,
}


def _ensure_dir(path: Path) -> None:
    """确保目录存在"""
    path.mkdir(parents=True, exist_ok=True)


class JsonStore:
    """JSON 文档存储

    每个 key 对应数据目录下的 ``<key>.json``。

    Attributes:
        data_dir: 数据目录
    """

    def __init__(self, data_dir: Path | str | None = None, defaults: dict[str, dict] | None = None):
        self.data_dir = Path(data_dir) if data_dir is not None else config.DATA_DIR
        self._defaults = defaults if defaults is not None else DEFAULTS

    def path_for(self, key: str) -> Path:
        """文档文件路径"""
        return self.data_dir / f"{key}.json"

    def default(self, key: str) -> dict:
        """默认文档（深拷贝，调用方可随意修改）"""
        return copy.deepcopy(self._defaults.get(key, {}))

    def load(self, key: str) -> dict:
        """加载文档

        Args:
            key: 文档 key

        Returns:
            文档内容；缺失或不可读时返回默认文档
        """
        path = self.path_for(key)

        if not path.exists():
            logger.info(f"[Store] No {key} file at {path}, using default")
            return self.default(key)

        try:
            with open(path, "rb") as f:
                data = json.loads(f.read().decode("utf-8"))
        except json.JSONDecodeError as e:
            logger.warning(f"[Store] Invalid JSON in {path}: {e}")
            metrics.inc("store.error", {"op": "load", "reason": "json"})
            return self.default(key)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"[Store] Load {key} failed: {e}")
            metrics.inc("store.error", {"op": "load", "reason": "io"})
            return self.default(key)

        if not isinstance(data, dict):
            logger.warning(f"[Store] {path} does not hold an object, using default")
            metrics.inc("store.error", {"op": "load", "reason": "shape"})
            return self.default(key)

        if key == config.SETTINGS_KEY:
            data = {**self.default(key), **data}

        logger.debug(f"[Store] Loaded {key} from {path}")
        return data

    def save(self, key: str, document: Any) -> bool:
        """保存文档

        使用 temp + rename 原子写入。

        Args:
            key: 文档 key
            document: JSON 可序列化的文档

        Returns:
            是否成功
        """
        path = self.path_for(key)

        try:
            json_bytes = json.dumps(document, ensure_ascii=False, indent=2).encode("utf-8")
            _ensure_dir(path.parent)

            fd, temp_path = tempfile.mkstemp(prefix=f"varboard_{key}_", suffix=".tmp", dir=path.parent)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(json_bytes)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(temp_path, path)
            except Exception:
                # 清理临时文件
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
                raise

        except (OSError, TypeError, ValueError) as e:
            logger.error(f"[Store] Save {key} failed: {e}")
            metrics.inc("store.error", {"op": "save"})
            return False

        logger.info(f"[Store] Saved {key} to {path}")
        return True

    def delete(self, key: str) -> bool:
        """删除文档文件"""
        path = self.path_for(key)
        try:
            if path.exists():
                os.unlink(path)
                logger.info(f"[Store] Deleted: {path}")
            return True
        except OSError as e:
            logger.error(f"[Store] Delete {key} failed: {e}")
            return False

    # === 便捷方法 ===

    def load_layout(self) -> dict:
        return self.load(config.LAYOUT_KEY)

    def save_layout(self, document: dict) -> bool:
        return self.save(config.LAYOUT_KEY, document)

    def load_settings(self) -> dict:
        return self.load(config.SETTINGS_KEY)

    def save_settings(self, settings: dict) -> bool:
        return self.save(config.SETTINGS_KEY, settings)
