"""标签值转换与字段填充模块.

把标签中的字符串值转换为字段的目标类型, 并据此填充结构体字段:

    @dataclass
    class Schema:
        title: str = ""
        min: float | None = None
        limit: int = 0

    schema = Schema()
    populate_fields_from_tags(schema, 'title:"Value" min:"-1.23" limit:"5"')
"""

from collections.abc import Callable, Mapping
from typing import Any, get_origin

from .config import Config
from .exceptions import PopulateError, StructExpectedError, TagValueError
from .kinds import deep_indirect
from .log import logger
from .options import Option
from .struct import is_struct_type, struct_fields
from .tag import Tag
from .typename import type_string

_TRUE = frozenset({"1", "t", "true"})
_FALSE = frozenset({"0", "f", "false"})


def parse_bool(raw: str) -> bool:
    """解析布尔字面量 (大小写不敏感): `1/t/true` 与 `0/f/false`."""
    folded = raw.casefold()
    if folded in _TRUE:
        return True
    if folded in _FALSE:
        return False
    raise ValueError(f"invalid truth value {raw!r}")


def _canonical(raw: str) -> str:
    # int()/float() 会接受空白、下划线与非 ASCII 数字
    if raw != raw.strip() or "_" in raw or not raw.isascii():
        raise ValueError(f"invalid numeric literal {raw!r}")
    return raw


def _parse_int(raw: str) -> int:
    return int(_canonical(raw), 10)


def _parse_float(raw: str) -> float:
    return float(_canonical(raw))


# bool 必须排在 int 之前 (bool 是 int 的子类)
_PARSERS: dict[type, Callable[[str], Any]] = {
    bool: parse_bool,
    int: _parse_int,
    float: _parse_float,
    str: str,
}


def scalar_kind(target: Any) -> type | None:
    """返回注解对应的可转换标量种类 (`bool`/`int`/`float`/`str`), 不支持时为 None."""
    tp = deep_indirect(target)
    if not isinstance(tp, type) or get_origin(tp) is not None:
        return None
    for kind in _PARSERS:
        if issubclass(tp, kind):
            return kind
    return None


def coerce(raw: str, target: Any, *, key: str | None = None) -> Any:
    """把单个字符串转换为 `target` 类型的值.

    `Optional[T]` 按 `T` 转换; 标量的子类 (如 `IntEnum`) 由解析后的值构造.

    Args:
        raw: 原始字符串.
        target: 目标类型注解.
        key: 标签键, 仅用于错误信息.

    Returns:
        Any: 转换后的值.

    Raises:
        TagValueError: 字符串无法按目标类型解析.
        TypeError: 目标类型不受支持.
    """
    kind = scalar_kind(target)
    if kind is None:
        raise TypeError(f"unsupported tag value target {type_string(target)}")

    tp = deep_indirect(target)
    try:
        value = _PARSERS[kind](raw)
        if tp is not kind:
            value = tp(value)
    except ValueError as e:
        raise TagValueError(raw, kind.__name__, key, e) from e
    return value


def read_tag(
    tag: Tag | str,
    key: str,
    target: Any = str,
    default: Any = None,
) -> Any:
    """读取并转换标签中的单个键.

    Returns:
        Any: 键存在时为转换后的值, 否则为 `default`.

    Raises:
        TagValueError: 值无法按目标类型解析.
    """
    raw = Tag.of(tag).get(key)
    if raw is None:
        return default
    return coerce(raw, target, key=key)


def to_lower_camel(name: str) -> str:
    """`max_length` -> `maxLength`, `Title` -> `title`."""
    head, *rest = name.split("_")
    camel = head + "".join(part[:1].upper() + part[1:] for part in rest)
    return camel[:1].lower() + camel[1:]


def _lookup(
    index: Mapping[str, tuple[str, str]], name: str, config: Config
) -> tuple[str, str] | None:
    for candidate in (name, to_lower_camel(name)):
        key = candidate if config.case_sensitive_keys else candidate.casefold()
        if key in index:
            return index[key]
    return None


def populate_fields_from_tags(
    dest: Any,
    tag: Tag | str,
    option: Option = Option.NONE,
) -> None:
    """按字段名从标签读取值并填充结构体的导出字段.

    字段名 (或其小驼峰形式) 作为标签键, 默认大小写不敏感. 不存在的键不会修改
    对应字段; 不受支持的字段类型被跳过. 每个字段独立处理, 所有转换错误在最后
    合并为一个 `PopulateError`, 已成功转换的字段保持赋值.

    Args:
        dest: 结构体实例.
        tag: Tag 或迷你格式字符串.
        option: Option 枚举 (如 `Option.CASE_SENSITIVE_KEYS`).

    Raises:
        StructExpectedError: `dest` 不是结构体实例.
        PopulateError: 一个或多个字段转换失败.
    """
    cls = type(dest)
    if not is_struct_type(cls):
        raise StructExpectedError(dest)

    config = Config.from_params(option)

    index: dict[str, tuple[str, str]] = {}
    for key, value in Tag.of(tag).items():
        folded = key if config.case_sensitive_keys else key.casefold()
        index.setdefault(folded, (key, value))

    errors: list[TagValueError] = []
    for field in struct_fields(cls):
        if not field.exported:
            continue
        if scalar_kind(field.annotation) is None:
            logger.debug(
                "[populate] 跳过不支持的字段 %s.%s", cls.__qualname__, field.name
            )
            continue

        found = _lookup(index, field.name, config)
        if found is None:
            continue

        key, raw = found
        try:
            value = coerce(raw, field.annotation, key=key)
        except TagValueError as e:
            errors.append(e)
            continue
        setattr(dest, field.name, value)

    if errors:
        logger.debug("[populate] %s 有 %d 个字段转换失败", cls.__qualname__, len(errors))
        raise PopulateError(errors)
