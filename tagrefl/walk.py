"""结构体字段遍历与标签名称解析模块.

两种遍历模式共用同一个引擎 (`_iter_fields`):

1. **标签遍历** (`walk_tagged_fields`): 访问顶层字段, 未打标签的嵌入结构体被展开,
   其子字段出现在嵌入字段的位置. 指定命名空间时只访问带该命名空间标签的字段,
   标签为 `-` 的字段及其子树不可见.
2. **递归遍历** (`walk_fields_recursively`): 先序访问所有可达字段 (包括嵌入字段本身),
   并向访问者提供从根到父节点的所有权路径.
"""

from collections.abc import Callable, Iterator, Sequence
from typing import Any

from .config import Config
from .exceptions import AmbiguousFieldError, FieldNotFoundError, StructExpectedError
from .kinds import deep_indirect, zero_value
from .log import format_path, logger
from .options import Option
from .struct import StructField, is_struct_type, struct_fields

FieldPath = tuple[StructField, ...]

# visit(value, field, tag)
TaggedVisitor = Callable[[Any, StructField, str], None]
# visit(value, field, path)
FieldVisitor = Callable[[Any, StructField, FieldPath], None]


def _root(value: Any) -> Any | None:
    """结构体实例原样返回, 结构体类返回其零值, 其他值返回 None."""
    if isinstance(value, type):
        return zero_value(value) if is_struct_type(value) else None
    if is_struct_type(type(value)):
        return value
    return None


def _materialize(
    value: Any, field: StructField, path: FieldPath, config: Config
) -> Any | None:
    """返回可继续遍历的结构体值.

    为 None 的嵌入字段使用临时零值代替, 不修改调用方的对象.
    """
    if value is not None:
        return value if is_struct_type(type(value)) else None
    if not field.embedded or config.skip_nil_embedded:
        return None

    tp = deep_indirect(field.annotation)
    if not is_struct_type(tp):
        return None
    # 自引用的嵌入会无限展开
    if tp is field.owner or any(p.owner is tp for p in path):
        return None

    logger.debug(
        "[walk] 嵌入字段 %s 为 None, 使用 %s 的临时零值",
        format_path(path, field),
        tp.__qualname__,
    )
    return zero_value(tp)


def _iter_fields(
    value: Any,
    namespace: str,
    path: FieldPath,
    recursive: bool,
    config: Config,
) -> Iterator[tuple[Any, StructField, str, FieldPath]]:
    for field in struct_fields(type(value)):
        # 未导出的非嵌入字段不可见
        if not field.exported and not field.embedded:
            continue

        tag = (field.tag.get(namespace) or "") if namespace else ""
        if tag == config.ignore:
            continue

        field_value = field.value_of(value)

        if field.embedded and not tag and not recursive:
            nested = _materialize(field_value, field, path, config)
            if nested is not None:
                yield from _iter_fields(
                    nested, namespace, (*path, field), recursive, config
                )
            continue

        if namespace and not tag:
            continue

        yield field_value, field, tag, path

        if recursive:
            nested = _materialize(field_value, field, path, config)
            if nested is not None:
                yield from _iter_fields(
                    nested, namespace, (*path, field), recursive, config
                )


def walk_tagged_fields(
    value: Any,
    visit: TaggedVisitor,
    namespace: str = "",
    option: Option = Option.NONE,
) -> None:
    """遍历结构体顶层字段 (包括展开后的嵌入字段).

    - `namespace` 为空: 访问所有导出字段, 嵌入结构体被展开 (嵌入字段本身不访问).
    - `namespace` 非空: 只访问带有该命名空间非空标签的字段; 带显式标签的嵌入字段
      作为普通字段访问, 不再展开; 标签为 `-` 的字段及其子树被跳过.

    非结构体值 (包括 None) 不产生任何访问. 访问者内部可以再次调用本函数.

    Args:
        value: 结构体实例或结构体类 (遍历其零值).
        visit: 访问者, 参数为 `(字段值, 字段描述符, 标签值)`.
        namespace: 标签命名空间.
        option: Option 枚举.
    """
    root = _root(value)
    if root is None:
        return

    config = Config.from_params(option)
    for field_value, field, tag, _ in _iter_fields(root, namespace, (), False, config):
        visit(field_value, field, tag)


def walk_fields_recursively(
    value: Any,
    visit: FieldVisitor,
    option: Option = Option.NONE,
) -> None:
    """先序递归遍历结构体的所有可达字段.

    每个导出字段或嵌入字段先被访问, 若其值为结构体则继续深入.
    访问者收到的 `path` 是从根到父节点的字段元组, 可用于构造组合键:

        def visit(value, field, path):
            key = format_path(path, field)  # "Deeper[Deeper][Baz]"

    Args:
        value: 结构体实例或结构体类 (遍历其零值).
        visit: 访问者, 参数为 `(字段值, 字段描述符, 所有权路径)`.
        option: Option 枚举.
    """
    root = _root(value)
    if root is None:
        return

    config = Config.from_params(option)
    for field_value, field, _, path in _iter_fields(root, "", (), True, config):
        visit(field_value, field, path)


def has_tagged_fields(value: Any, namespace: str) -> bool:
    """结构体在给定命名空间下是否至少有一个可见字段."""
    root = _root(value)
    if root is None:
        return False

    config = Config.from_params()
    fields = _iter_fields(root, namespace, (), False, config)
    return next(fields, None) is not None


def _selector(selector: str | Sequence[str]) -> tuple[str, ...]:
    parts = tuple(selector.split(".")) if isinstance(selector, str) else tuple(selector)
    if not parts or not all(parts):
        raise ValueError(f"invalid field selector: {selector!r}")
    return parts


def _resolve(
    start: Any, parts: tuple[str, ...], namespace: str, config: Config
) -> tuple[Any, StructField, str] | None:
    best: tuple[Any, StructField, str] | None = None
    best_depth = -1
    ambiguous = False

    for value, field, tag, path in _iter_fields(start, namespace, (), False, config):
        full = (*(p.name for p in path), field.name)
        if full == parts:
            return value, field, tag

        # 提升形式: 省略嵌入字段, 浅层字段遮蔽深层同名字段
        if parts == (field.name,):
            depth = len(path)
            if best is None or depth < best_depth:
                best, best_depth, ambiguous = (value, field, tag), depth, False
            elif depth == best_depth:
                ambiguous = True

    if ambiguous:
        raise AmbiguousFieldError(parts, namespace)
    if best is not None or len(parts) == 1:
        return best

    # 穿过可见的普通结构体字段继续解析剩余部分, 较长的前缀优先
    for i in range(len(parts) - 1, 0, -1):
        head = _resolve(start, parts[:i], namespace, config)
        if head is None:
            continue
        value, field, _ = head
        nested = _materialize(value, field, (), config)
        if nested is not None:
            return _resolve(nested, parts[i:], namespace, config)
    return None


def find_tagged_name(
    root: Any,
    selector: str | Sequence[str],
    namespace: str,
    option: Option = Option.NONE,
) -> str | None:
    """解析字段在命名空间下的对外名称, 找不到时返回 None.

    Args:
        root: 结构体实例或结构体类.
        selector: 字段选择器, 点分字符串 (`"data.deeper"`) 或字段名序列.
            可以是包含嵌入字段的完整路径, 也可以是省略嵌入字段的提升形式;
            多段选择器还可以穿过带标签的普通结构体字段.
        namespace: 标签命名空间.
        option: Option 枚举.

    Returns:
        str | None: 标签值 (非空且不是 `-` 时), 否则为声明的字段名.

    Raises:
        StructExpectedError: `root` 不是结构体.
        AmbiguousFieldError: 提升形式的选择器在同一深度匹配到多个字段.
    """
    start = _root(root)
    if start is None:
        raise StructExpectedError(root)

    config = Config.from_params(option)
    found = _resolve(start, _selector(selector), namespace, config)
    if found is None:
        return None

    _, field, tag = found
    return tag or field.name


def tagged(
    root: Any,
    selector: str | Sequence[str],
    namespace: str,
    option: Option = Option.NONE,
) -> str:
    """解析字段在命名空间下的对外名称.

    与 `find_tagged_name` 相同, 但找不到字段时抛出异常: 这表示调用方传入了错误的根对象、
    命名空间或选择器 (例如目标字段位于被 `-` 忽略的嵌入结构体中).

    Raises:
        FieldNotFoundError: 在 `root` 与 `namespace` 下找不到目标字段.
    """
    name = find_tagged_name(root, selector, namespace, option)
    if name is None:
        raise FieldNotFoundError(_selector(selector), namespace)
    return name
