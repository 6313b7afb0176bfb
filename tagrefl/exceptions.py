"""tagrefl 特定的异常类.

该模块为 tagrefl 库定义了异常层次结构.
"""

from typing import Any


class ReflError(Exception):
    """所有 tagrefl 异常的基类."""

    pass


class TagSyntaxError(ReflError, ValueError):
    """标签字符串格式错误时抛出.

    Case:
        - 键后缺少冒号或值未加引号 (如 `json:a`).
        - 值的引号未闭合.
    """

    def __init__(self, msg: str, raw: str, pos: int) -> None:
        """初始化标签语法错误.

        Args:
            msg: 错误描述信息.
            raw: 原始标签字符串.
            pos: 出错的字符位置.
        """
        super().__init__(msg)
        self.raw = raw
        self.pos = pos

    def __str__(self) -> str:
        return f"{super().__str__()} (at {self.pos} in {self.raw!r})"


class TagValueError(ReflError, ValueError):
    """标签值无法转换为目标字段类型时抛出.

    在 `populate_fields_from_tags` 中不会中断其他字段的处理, 而是被收集到
    `PopulateError` 中.
    """

    def __init__(
        self,
        raw: str,
        kind: str,
        key: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        """初始化标签值错误.

        Args:
            raw: 无法解析的原始字符串.
            kind: 尝试的目标类型名称 (如 `int`).
            key: 标签键.
            cause: 底层解析异常.
        """
        msg = f"failed to parse {kind} value {raw}"
        if key is not None:
            msg += f" in tag {key}"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)
        self.raw = raw
        self.kind = kind
        self.key = key
        self.__cause__ = cause


class PopulateError(ReflError, ValueError):
    """从标签填充字段时一个或多个字段失败.

    Attributes:
        errors: 按字段处理顺序收集的 `TagValueError` 列表.
    """

    def __init__(self, errors: list[TagValueError]) -> None:
        super().__init__(", ".join(str(e) for e in errors))
        self.errors = errors


class FieldNotFoundError(ReflError, LookupError):
    """在给定根结构体和命名空间下无法找到目标字段时抛出.

    这表示调用方误用 (错误的根对象、错误的命名空间或过期的选择器),
    不应被重试或恢复.
    """

    def __init__(self, selector: tuple[str, ...], namespace: str) -> None:
        path = ".".join(selector)
        super().__init__(f"field {path!r} not found under tag {namespace!r}")
        self.selector = selector
        self.namespace = namespace


class AmbiguousFieldError(FieldNotFoundError):
    """提升后的选择器在同一深度匹配到多个字段."""

    def __str__(self) -> str:
        path = ".".join(self.selector)
        return f"ambiguous selector {path!r} under tag {self.namespace!r}"


class StructExpectedError(ReflError, TypeError):
    """需要结构体的操作收到了非结构体值时抛出."""

    def __init__(self, received: Any) -> None:
        from .typename import type_string

        tp = received if isinstance(received, type) else type(received)
        super().__init__(f"struct expected, {type_string(tp)} received")
        self.received = received


class MissingFieldsError(ReflError, ValueError):
    """`no_empty_fields` 发现零值的导出字段时抛出.

    Attributes:
        fields: 零值字段的名称列表 (按声明顺序).
    """

    def __init__(self, fields: list[str]) -> None:
        super().__init__(f"missing: {fields}")
        self.fields = fields
