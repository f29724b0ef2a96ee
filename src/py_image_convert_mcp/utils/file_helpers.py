"""工具函数模块。

提供图像文件查找相关的实用工具函数。
"""

from collections.abc import Iterable, Iterator
from pathlib import Path

from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def find_image_files(
    directory: str | Path,
    extensions: Iterable[str],
    recursive: bool = False,
) -> Iterator[Path]:
    """查找目录中指定扩展名的图像文件，按路径排序输出。

    Args:
        directory: 搜索目录
        extensions: 接受的扩展名，如 (".png",)
        recursive: 是否递归搜索子目录

    Yields:
        Path: 图像文件路径
    """
    directory = Path(directory)
    accepted = {ext.lower() for ext in extensions}

    if not directory.is_dir():
        logger.warning(MessageFormatter.file_not_found(directory))
        return

    # 选择搜索模式
    pattern = "**/*" if recursive else "*"

    try:
        for file_path in sorted(directory.glob(pattern)):
            if file_path.is_file() and file_path.suffix.lower() in accepted:
                yield file_path
    except PermissionError as e:
        logger.error(MessageFormatter.operation_failed("访问目录", directory, e))
