"""转换结果模型。

定义单个转换、批量处理以及优化搜索的结果数据结构。
"""

from enum import Enum
from typing import Annotated, Any, Literal

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field, model_validator


def format_size(size_bytes: int) -> str:
    """格式化文件大小为人类可读格式"""
    return naturalsize(size_bytes, binary=True)


class ItemStatus(str, Enum):
    """批量条目状态

    PENDING 和 CONVERTING 供调用方跟踪进行中的条目；
    BatchPipeline 返回的条目只会是 COMPLETED 或 ERROR。
    """

    PENDING = "pending"
    CONVERTING = "converting"
    COMPLETED = "completed"
    ERROR = "error"


class ConversionSuccess(BaseModel):
    """转换成功的结果"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    output_bytes: bytes = Field(repr=False, description="输出文件字节")
    output_name: str = Field(description="输出文件名")
    mime_type: str = Field(description="输出 MIME 类型")
    elapsed_ms: float = Field(ge=0, description="耗时（毫秒）")
    output_format: str = Field(description="输出格式")
    original_size: int = Field(ge=0, description="原始大小（字节）")
    quality_used: int | None = Field(None, description="优化模式选中的质量等级")
    size_constraint_met: bool | None = Field(
        None, description="是否满足目标大小，非优化模式为 None"
    )

    @property
    def output_size(self) -> int:
        return len(self.output_bytes)

    def get_compression_ratio(self) -> float:
        """体积缩减比例（百分比），变大时为 0"""
        if self.original_size == 0:
            return 0.0
        saved = max(0, self.original_size - self.output_size)
        return (saved / self.original_size) * 100


class ConversionFailure(BaseModel):
    """转换失败的结果"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    message: str = Field(description="错误信息")
    error_type: str = Field("processing", description="错误类型")


ConversionOutcome = Annotated[
    ConversionSuccess | ConversionFailure, Field(discriminator="kind")
]


class ConversionItem(BaseModel):
    """批量处理中的单个条目

    输出数据当且仅当状态为 completed 时存在，错误信息当且仅当状态为 error 时存在。
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="条目标识（调用方 id 或输入序号）")
    name: str = Field(description="原始文件名")
    status: ItemStatus = Field(ItemStatus.PENDING, description="条目状态")
    outcome: ConversionOutcome | None = Field(None, description="转换结果")

    @model_validator(mode="after")
    def check_outcome_matches_status(self) -> "ConversionItem":
        match self.status:
            case ItemStatus.COMPLETED:
                if not isinstance(self.outcome, ConversionSuccess):
                    raise ValueError("completed 状态必须携带成功结果")
            case ItemStatus.ERROR:
                if not isinstance(self.outcome, ConversionFailure):
                    raise ValueError("error 状态必须携带失败结果")
            case _:
                if self.outcome is not None:
                    raise ValueError(f"{self.status.value} 状态不能携带结果")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.status in (ItemStatus.COMPLETED, ItemStatus.ERROR)

    @property
    def success(self) -> ConversionSuccess | None:
        return self.outcome if isinstance(self.outcome, ConversionSuccess) else None

    @property
    def output_bytes(self) -> bytes | None:
        return self.success.output_bytes if self.success else None

    @property
    def output_name(self) -> str | None:
        return self.success.output_name if self.success else None

    @property
    def mime_type(self) -> str | None:
        return self.success.mime_type if self.success else None

    @property
    def elapsed_ms(self) -> float | None:
        return self.success.elapsed_ms if self.success else None

    @property
    def error_message(self) -> str | None:
        if isinstance(self.outcome, ConversionFailure):
            return self.outcome.message
        return None

    def get_summary(self) -> str:
        """条目结果摘要"""
        if self.status == ItemStatus.ERROR:
            return f"失败: {self.error_message}"
        success = self.success
        if success is None:
            return self.status.value

        summary = (
            f"{format_size(success.original_size)} → "
            f"{format_size(success.output_size)} "
            f"({success.elapsed_ms:.0f} ms)"
        )
        if success.size_constraint_met is False:
            summary += "，未达到目标大小"
        return summary

    def to_dict(self) -> dict[str, Any]:
        """转换为不含原始字节的字典，便于序列化输出"""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
        }
        if success := self.success:
            result.update(
                {
                    "output_name": success.output_name,
                    "mime_type": success.mime_type,
                    "output_size": success.output_size,
                    "compression_ratio": round(success.get_compression_ratio(), 1),
                    "elapsed_ms": round(success.elapsed_ms, 2),
                    "quality_used": success.quality_used,
                    "size_constraint_met": success.size_constraint_met,
                }
            )
        if self.error_message is not None:
            result["error_message"] = self.error_message
        return result


class ArchiveEntry(BaseModel):
    """压缩包中的一个文件"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="包内文件名")
    data: bytes = Field(repr=False, description="文件字节")


class BatchResult(BaseModel):
    """批量处理结果，条目顺序与输入顺序一致"""

    model_config = ConfigDict(frozen=True)

    items: list[ConversionItem] = Field(default_factory=list, description="所有条目")

    def get_completed_items(self) -> list[ConversionItem]:
        """获取成功的条目"""
        return [i for i in self.items if i.status == ItemStatus.COMPLETED]

    def get_failed_items(self) -> list[ConversionItem]:
        """获取失败的条目"""
        return [i for i in self.items if i.status == ItemStatus.ERROR]

    def get_total_count(self) -> int:
        return len(self.items)

    def get_success_count(self) -> int:
        return len(self.get_completed_items())

    def get_failure_count(self) -> int:
        return len(self.get_failed_items())

    def get_success_rate(self) -> float:
        """获取成功率（百分比）"""
        total = self.get_total_count()
        if total == 0:
            return 0.0
        return (self.get_success_count() / total) * 100

    def get_total_original_size(self) -> int:
        """成功条目的原始总大小"""
        return sum(i.success.original_size for i in self.get_completed_items())

    def get_total_output_size(self) -> int:
        """成功条目的输出总大小"""
        return sum(i.success.output_size for i in self.get_completed_items())

    def to_archive_entries(self) -> list[ArchiveEntry]:
        """只取成功条目生成压缩包条目，保持输入顺序"""
        return [
            ArchiveEntry(name=item.success.output_name, data=item.success.output_bytes)
            for item in self.get_completed_items()
        ]

    def get_summary(self) -> str:
        """批量处理摘要"""
        total = self.get_total_count()
        if total == 0:
            return "没有需要处理的文件"

        return (
            f"处理 {self.get_success_count()}/{total} 个文件 "
            f"(成功率 {self.get_success_rate():.1f}%), "
            f"{format_size(self.get_total_original_size())} → "
            f"{format_size(self.get_total_output_size())}"
        )


class OptimizationResult(BaseModel):
    """目标大小搜索结果"""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False, description="选中等级的编码结果")
    format: str = Field(description="输出格式")
    level: int = Field(description="选中的质量等级")
    attempts: int = Field(ge=1, description="编码尝试次数")
    target_bytes: int = Field(gt=0, description="目标字节数")
    constraint_met: bool = Field(description="是否满足目标大小")

    @property
    def size(self) -> int:
        return len(self.data)
