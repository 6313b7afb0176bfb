"""tagrefl 配置对象."""

from dataclasses import dataclass

from .options import Option
from .tag import IGNORE


@dataclass(frozen=True)
class Config:
    """遍历/填充配置 (不可变).

    在 API 入口层创建, 然后传递给遍历引擎与填充逻辑.

    Attributes:
        flags: 选项标志 (IntFlag).
        ignore: 忽略标记, 标签值等于它的字段在该命名空间下不可见.
    """

    flags: Option = Option.NONE
    ignore: str = IGNORE

    @classmethod
    def from_params(cls, option: Option = Option.NONE) -> "Config":
        """从参数构建配置对象.

        Args:
            option: Option 枚举.

        Returns:
            Config: 配置对象.
        """
        return cls(flags=option)

    @property
    def skip_nil_embedded(self) -> bool:
        """是否跳过为 None 的嵌入结构体."""
        return bool(self.flags & Option.SKIP_NIL_EMBEDDED)

    @property
    def case_sensitive_keys(self) -> bool:
        """是否大小写敏感地查找标签键."""
        return bool(self.flags & Option.CASE_SENSITIVE_KEYS)
