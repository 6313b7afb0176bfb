"""类型规范名称模块.

为任意类型注解生成可区分、可逆拆分的文本名称:

- 内置类型: `int`, `list[str]`, `dict[int, str]`.
- 声明的类型: `<module>.<qualname>`, 如 `tests.sample.User`.
- 嵌套类或函数内定义的类 (qualname 自身包含 `.`): 使用 `::` 连接模块与名称,
  如 `tests.sample::Outer.Inner`, 以便解析时能把模块路径与名称拆开.
- 可空类型 `Optional[T]`: `*` + T 的名称.
"""

from typing import Any, ForwardRef, Literal, NewType, TypeVar, get_args, get_origin

from .kinds import is_union, optional_inner
from .struct import split_annotated

TypeString = NewType("TypeString", str)

# 模块路径与带 `.` 的限定名之间的分隔符
QUALIFIED_SEPARATOR = "::"


def _named(tp: Any) -> str:
    module = getattr(tp, "__module__", None)
    name = getattr(tp, "__qualname__", None) or getattr(tp, "__name__", None)
    if name is None:
        return repr(tp)
    if module is None or module == "builtins":
        return name
    separator = QUALIFIED_SEPARATOR if "." in name else "."
    return f"{module}{separator}{name}"


def _render(tp: Any) -> str:
    tp, _ = split_annotated(tp)

    inner = optional_inner(tp)
    if inner is not None:
        return "*" + _render(inner)

    if tp is None or tp is type(None):
        return "None"
    if tp is Any:
        return "Any"
    if tp is Ellipsis:
        return "..."
    if isinstance(tp, str):
        return tp
    if isinstance(tp, ForwardRef):
        return tp.__forward_arg__
    if isinstance(tp, TypeVar):
        return tp.__name__
    if isinstance(tp, list):
        # Callable[[A, B], R] 的参数列表
        return "[" + ", ".join(_render(a) for a in tp) + "]"

    origin = get_origin(tp)
    if origin is None:
        return _named(tp)

    args = get_args(tp)
    if origin is Literal:
        return "Literal[" + ", ".join(repr(a) for a in args) + "]"
    if is_union(tp):
        if type(None) in args:
            return "*" + " | ".join(_render(a) for a in args if a is not type(None))
        return " | ".join(_render(a) for a in args)
    if not args:
        return _named(origin)
    return _named(origin) + "[" + ", ".join(_render(a) for a in args) + "]"


def type_string(tp: Any) -> TypeString:
    """返回类型的规范名称.

    同一类型多次调用返回完全相同的字符串, 且
    `type_string(Optional[T]) == "*" + type_string(T)`.

    Args:
        tp: 类型或类型注解. `Annotated` 元数据不参与命名.

    Returns:
        TypeString: 规范名称.

    Examples:
        >>> type_string(list[str])
        'list[str]'
        >>> type_string(Optional[int])
        '*int'
    """
    return TypeString(_render(tp))
