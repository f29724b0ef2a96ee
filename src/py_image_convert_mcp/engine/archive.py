"""打包模块。

将转换成功的输出打包为 ZIP 字节流，同名文件自动添加数字后缀。
"""

import zipfile
from collections.abc import Sequence
from io import BytesIO
from pathlib import Path

from ..config import get_config
from ..exceptions import ArchiveError
from ..models.conversion_result import ArchiveEntry, BatchResult, format_size
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from ..utils.naming_helpers import deduplicate_names


logger = get_logger()


class ArchiveBuilder:
    """ZIP 打包器"""

    def __init__(self, compress_level: int | None = None):
        """初始化打包器

        Args:
            compress_level: DEFLATE 压缩级别 0-9（None时使用配置默认值）
        """
        if compress_level is None:
            compress_level = get_config().archive.COMPRESS_LEVEL
        self.compress_level = compress_level

    def build(self, entries: Sequence[ArchiveEntry]) -> bytes:
        """构建 ZIP 字节流

        每个条目对应一个包内文件，顺序与输入一致；空列表得到有效的空压缩包。

        Raises:
            ArchiveError: 底层 I/O 或 ZIP 编码失败
        """
        names = deduplicate_names([entry.name for entry in entries])
        buffer = BytesIO()

        try:
            with zipfile.ZipFile(
                buffer,
                "w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self.compress_level,
            ) as zf:
                for name, entry in zip(names, entries):
                    zf.writestr(name, entry.data)
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            raise ArchiveError(f"构建压缩包失败: {e}") from e

        archive = buffer.getvalue()
        logger.info(f"打包 {len(entries)} 个文件, 压缩包大小 {format_size(len(archive))}")
        return archive

    def build_from_batch(self, batch: BatchResult) -> bytes:
        """只打包批量结果中成功的条目"""
        return self.build(batch.to_archive_entries())

    def write(self, entries: Sequence[ArchiveEntry], output_path: str | Path) -> Path:
        """构建压缩包并写入磁盘

        Returns:
            Path: 写入的文件路径
        """
        output_path = Path(output_path)
        archive = self.build(entries)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(archive)
        except OSError as e:
            raise ArchiveError(
                MessageFormatter.operation_failed("写入压缩包", output_path, e),
                output_path.name,
            ) from e

        logger.info(f"压缩包已保存: {output_path}")
        return output_path
