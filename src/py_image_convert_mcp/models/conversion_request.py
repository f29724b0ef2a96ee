"""转换请求模型。

定义调用方为每个文件提交的转换请求。
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import ConversionMode, ModeSpec, get_mode_spec


class ConversionRequest(BaseModel):
    """单个文件的转换请求，创建后不可变"""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False, description="原始文件字节")
    filename: str = Field(min_length=1, description="原始文件名")
    mode: ConversionMode = Field(description="转换模式")
    target_size_kb: int | None = Field(None, gt=0, description="目标大小（KB）")
    request_id: str | None = Field(None, description="调用方指定的标识")

    @model_validator(mode="before")
    @classmethod
    def drop_unused_target(cls, values: Any) -> Any:
        # 非优化模式忽略目标大小
        if isinstance(values, dict) and values.get("mode") is not None:
            try:
                spec = get_mode_spec(values["mode"])
            except ValueError:
                return values  # 交给字段校验报告无效模式
            if not spec.is_optimize:
                values = {**values, "target_size_kb": None}
        return values

    @model_validator(mode="after")
    def require_target_for_optimize(self) -> "ConversionRequest":
        if self.spec.is_optimize and self.target_size_kb is None:
            raise ValueError(f"{self.mode.value} 模式必须指定 target_size_kb")
        return self

    @property
    def spec(self) -> ModeSpec:
        """该请求模式的格式约定"""
        return get_mode_spec(self.mode)

    @property
    def target_bytes(self) -> int | None:
        """目标字节数"""
        if self.target_size_kb is None:
            return None
        return self.target_size_kb * 1024

    @property
    def size(self) -> int:
        return len(self.data)
