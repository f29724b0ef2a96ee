"""文件命名工具模块。

提供统一的输出文件命名策略和去重功能。
"""

import itertools
from pathlib import PurePath

from ..models.constants import get_extension


class FileNamingStrategy:
    """文件命名策略类"""

    @staticmethod
    def generate_output_name(filename: str, target_format: str) -> str:
        """生成输出文件名：保留原始文件名主干，替换为目标格式的扩展名

        Args:
            filename: 原始文件名（可以包含目录部分）
            target_format: 目标格式，如 PNG / WEBP / JPEG

        Returns:
            str: 输出文件名（不含路径）
        """
        stem = PurePath(filename).stem or "image"
        return f"{stem}{get_extension(target_format)}"

    @staticmethod
    def make_unique_name(name: str, used_names: set[str]) -> str:
        """确保名称在已用集合中唯一，冲突时添加数字后缀

        Args:
            name: 原始名称
            used_names: 已使用的名称集合（不会被修改）

        Returns:
            str: 唯一的名称
        """
        if name not in used_names:
            return name

        path = PurePath(name)
        base = path.stem
        suffix = path.suffix

        # 使用 itertools.count 生成无限序列，已占用的后缀直接跳过
        for counter in itertools.count(1):
            candidate = f"{base}_{counter}{suffix}"
            if candidate not in used_names:
                return candidate

        # 理论上永远不会到达这里，但为了类型检查器
        return name  # pragma: no cover


def deduplicate_names(names: list[str]) -> list[str]:
    """按顺序为名称列表去重，后出现的同名项获得数字后缀"""
    used: set[str] = set()
    result = []
    for name in names:
        unique = FileNamingStrategy.make_unique_name(name, used)
        used.add(unique)
        result.append(unique)
    return result
