"""类型分类与零值工具.

本模块中的函数既接受运行时值, 也接受类型注解 (`int`, `list[str]`,
`Optional[User]` 等). `Optional[T]` 在这里扮演指针的角色: 可空的包装层.
"""

import dataclasses
import math
import types as stdlib_types
from collections.abc import Mapping, Sequence, Set, Sized
from enum import Enum
from typing import Any, Literal, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel

from .exceptions import MissingFieldsError, StructExpectedError
from .log import logger
from .struct import is_struct_type, resolved_annotations, split_annotated, struct_fields

T = TypeVar("T")

_SCALARS = (bool, int, float, complex, str, bytes)
_TEXT = (str, bytes, bytearray)
_BUILTIN_CONTAINERS = (list, tuple, set, frozenset, dict)


def _is_annotation(value: Any) -> bool:
    return isinstance(value, type) or get_origin(value) is not None


def is_union(tp: Any) -> bool:
    """`tp` 是否为 `Union[...]` 或 `X | Y`."""
    origin = get_origin(tp)
    return origin is Union or origin is stdlib_types.UnionType


def optional_inner(tp: Any) -> Any | None:
    """若 `tp` 为 `Optional[X]` 则返回 `X`, 否则返回 None."""
    if not is_union(tp):
        return None
    args = get_args(tp)
    non_none = [a for a in args if a is not type(None)]
    if len(non_none) == 1 and len(args) == 2:
        return non_none[0]
    return None


def deep_indirect(tp: Any) -> Any:
    """去除所有 `Annotated` 与 `Optional` 包装层, 返回第一个非可空类型."""
    while True:
        tp, _ = split_annotated(tp)
        inner = optional_inner(tp)
        if inner is None:
            return tp
        tp = inner


def _as_type(value: Any) -> Any:
    return deep_indirect(value) if _is_annotation(value) else type(value)


def _is_class(tp: Any) -> bool:
    # 3.10 中 isinstance(list[int], type) 为 True
    return isinstance(tp, type) and get_origin(tp) is None


def _is_container_type(tp: Any) -> bool:
    origin = get_origin(tp) or tp
    if not isinstance(origin, type):
        return False
    if issubclass(origin, _TEXT):
        return False
    return issubclass(origin, (Sequence, Mapping, Set))


def is_struct(value: Any) -> bool:
    """值或注解是否为结构体 (可空包装会被剥离)."""
    if value is None:
        return False
    return is_struct_type(_as_type(value))


def is_slice_or_map(value: Any) -> bool:
    """值或注解是否为序列/集合/映射 (str 与 bytes 除外)."""
    if value is None:
        return False
    return _is_container_type(_as_type(value))


def is_scalar(value: Any) -> bool:
    """值或注解是否为标量 (bool/int/float/complex/str/bytes)."""
    if value is None:
        return False
    tp = _as_type(value)
    return _is_class(tp) and issubclass(tp, _SCALARS)


def find_embedded_slice_or_map(value: Any) -> Any | None:
    """在嵌入字段中深度优先查找序列/映射类型.

    Returns:
        找到的字段注解, 未找到时为 None.
    """
    if value is None:
        return None

    tp = _as_type(value)
    if not is_struct_type(tp):
        return None

    for field in struct_fields(tp):
        if not field.embedded:
            continue
        if is_slice_or_map(field.annotation):
            return field.annotation
        found = find_embedded_slice_or_map(field.annotation)
        if found is not None:
            return found

    return None


def is_zero(value: Any) -> bool:
    """`value` 是否为其类型的零值.

    - None, False, 数值 0 (负零不算零值), 空字符串/字节/容器.
    - tuple 视为定长数组: 所有元素均为零值.
    - 结构体: 所有字段均为零值.
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, int):
        return value == 0
    if isinstance(value, float):
        return value == 0.0 and math.copysign(1.0, value) > 0
    if isinstance(value, complex):
        return is_zero(value.real) and is_zero(value.imag)
    if isinstance(value, _TEXT):
        return len(value) == 0
    if isinstance(value, tuple):
        return all(is_zero(item) for item in value)
    if is_struct_type(type(value)):
        return all(is_zero(f.value_of(value)) for f in struct_fields(type(value)))
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def _zero_struct(cls: type) -> Any:
    if issubclass(cls, BaseModel):
        values = {
            name: zero_value(info.annotation)
            for name, info in cls.model_fields.items()
            if info.is_required()
        }
        return cls.model_construct(**values)

    annotations = resolved_annotations(cls)
    kwargs = {
        f.name: zero_value(annotations.get(f.name, Any))
        for f in dataclasses.fields(cls)
        if f.init
        and f.default is dataclasses.MISSING
        and f.default_factory is dataclasses.MISSING
    }
    return cls(**kwargs)


def zero_value(tp: Any) -> Any:
    """构造类型注解 `tp` 的零值.

    Optional 与无法构造的类型返回 None; 结构体递归填充必填字段.
    """
    tp, _ = split_annotated(tp)
    if tp is None or tp is type(None) or optional_inner(tp) is not None:
        return None

    origin = get_origin(tp)
    if origin is Literal:
        return get_args(tp)[0]
    if is_union(tp):
        return zero_value(get_args(tp)[0])
    if origin is not None:
        tp = origin

    supertype = getattr(tp, "__supertype__", None)
    if supertype is not None:
        return zero_value(supertype)
    if not isinstance(tp, type):
        return None
    if is_struct_type(tp):
        logger.debug("[zero_value] 构造 %s 的零值", tp.__qualname__)
        return _zero_struct(tp)
    if issubclass(tp, Enum):
        return next(iter(tp), None)
    if issubclass(tp, _SCALARS + _BUILTIN_CONTAINERS):
        return tp()
    return None


def as_(value: Any, target: type[T] | tuple[type, ...]) -> T | None:
    """基于能力的类型转换.

    当 `value` 是 `target` (类、类元组或 runtime_checkable 协议) 的实例时返回
    `value`, 否则返回 None.

    Raises:
        TypeError: `target` 不是类型或类型元组.
    """
    targets = target if isinstance(target, tuple) else (target,)
    if not targets or not all(isinstance(t, type) for t in targets):
        raise TypeError(f"target must be a type or a tuple of types, got {target!r}")
    if value is None:
        return None
    if isinstance(value, target):
        return value
    return None


def no_empty_fields(value: Any) -> None:
    """确认结构体的所有导出字段都不是零值.

    Raises:
        StructExpectedError: `value` 不是结构体实例.
        MissingFieldsError: 存在零值的导出字段.
    """
    if not is_struct_type(type(value)):
        raise StructExpectedError(value)

    missing = [
        f.name
        for f in struct_fields(type(value))
        if f.exported and is_zero(f.value_of(value))
    ]
    if missing:
        raise MissingFieldsError(missing)
