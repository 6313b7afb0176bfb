r"""字段标签定义模块.

标签 (Tag) 是附加在字段上的元数据, 以命名空间为键保存原始字符串值.
声明方式为空格分隔的 `键:"值"` 迷你格式::

    json:"name" path:"id" query:"-"

- `-` (IGNORE) 表示该字段及其子树在该命名空间下不可见.
- 其他非空值为字段在该命名空间下的对外名称.
"""

from collections.abc import Iterator, Mapping
from typing import Any, cast, final

from pydantic import Field
from pydantic_core import PydanticUndefined
from typing_extensions import Self

from .exceptions import TagSyntaxError

IGNORE = "-"

# TagField 写入 json_schema_extra 的键
TAG_KEY = "refl_tag"
EMBED_KEY = "refl_embed"

_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t", "r": "\r"}
_UNESCAPES = {v: "\\" + k for k, v in _ESCAPES.items()}


def _is_key_char(ch: str) -> bool:
    return ch > " " and ch not in ':"\x7f'


def parse_tag(raw: str) -> dict[str, str]:
    """解析标签迷你格式字符串.

    同一个键出现多次时, 以第一次出现的值为准.

    Args:
        raw: 形如 `key:"value" key2:"value2"` 的字符串.

    Returns:
        dict[str, str]: 按出现顺序排列的键值对.

    Raises:
        TagSyntaxError: 字符串格式错误.
    """
    result: dict[str, str] = {}
    pos = 0
    size = len(raw)

    while True:
        while pos < size and raw[pos].isspace():
            pos += 1
        if pos >= size:
            break

        start = pos
        while pos < size and _is_key_char(raw[pos]):
            pos += 1
        if pos == start:
            raise TagSyntaxError("invalid tag key", raw, pos)
        key = raw[start:pos]

        if raw[pos : pos + 2] != ':"':
            raise TagSyntaxError(f'tag key {key!r} must be followed by :"', raw, pos)
        pos += 2

        chars: list[str] = []
        while True:
            if pos >= size:
                raise TagSyntaxError(f"unterminated value for tag {key!r}", raw, pos)
            ch = raw[pos]
            if ch == '"':
                pos += 1
                break
            if ch == "\\":
                esc = raw[pos + 1 : pos + 2]
                if esc not in _ESCAPES:
                    raise TagSyntaxError(f"invalid escape in tag {key!r}", raw, pos)
                chars.append(_ESCAPES[esc])
                pos += 2
                continue
            chars.append(ch)
            pos += 1

        result.setdefault(key, "".join(chars))

    return result


class Tag:
    """不可变的标签映射 (命名空间 -> 原始字符串).

    `get()` 区分 "缺失" (返回 None) 与 "存在但为空" (返回 "").

    Examples:
        >>> tag = Tag('json:"a" path:"b"', query="q")
        >>> tag.get("json")
        'a'
        >>> tag.lookup("form")
        ('', False)
        >>> str(tag)
        'json:"a" path:"b" query:"q"'
    """

    __slots__ = ("_items",)

    def __init__(self, raw: str = "", /, **tags: str) -> None:
        items = parse_tag(raw) if raw else {}
        for key, value in tags.items():
            if not isinstance(value, str):
                raise TypeError(
                    f"Tag value for {key!r} must be str, got {type(value).__name__}"
                )
            items[key] = value
        self._items = items

    @classmethod
    def of(cls, value: "Tag | str | Mapping[str, str] | None") -> Self:
        """将 Tag / 迷你格式字符串 / 映射 / None 统一转换为 Tag."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls()
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, Mapping):
            return cls(**value)
        raise TypeError(f"Cannot build Tag from {type(value).__name__}")

    def get(self, key: str, default: str | None = None) -> str | None:
        """返回命名空间 `key` 的原始值, 缺失时返回 `default`."""
        return self._items.get(key, default)

    def lookup(self, key: str) -> tuple[str, bool]:
        """返回 `(value, present)`, 缺失时为 `("", False)`."""
        if key in self._items:
            return self._items[key], True
        return "", False

    def merge(self, other: "Tag") -> "Tag":
        """返回合并后的新 Tag, `other` 中的键覆盖当前键."""
        merged = Tag()
        merged._items = {**self._items, **other._items}
        return merged

    def keys(self) -> Iterator[str]:
        return iter(self._items)

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self._items.items())

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __getitem__(self, key: str) -> str:
        return self._items[key]

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(frozenset(self._items.items()))

    def __str__(self) -> str:
        parts = []
        for key, value in self._items.items():
            escaped = "".join(_UNESCAPES.get(ch, ch) for ch in value)
            parts.append(f'{key}:"{escaped}"')
        return " ".join(parts)

    def __repr__(self) -> str:
        return f"Tag({str(self)!r})"


@final
class EmbedType:
    """嵌入字段标记 (Sentinel Object).

    在 `Annotated` 元数据中声明字段为嵌入字段, 其子字段会被提升到外层结构体:

        base: Annotated[Base, EMBED]
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "EMBED"

    # 拷贝与 Pickle 之后仍以 `is EMBED` 判断
    def __copy__(self) -> Self:
        return self

    def __deepcopy__(self, memo: Any) -> Self:
        return self

    def __reduce__(self) -> str:
        return "EMBED"


EMBED = EmbedType()


def TagField(
    default: Any = PydanticUndefined,
    *,
    tag: Tag | str | None = None,
    embed: bool = False,
    default_factory: Any | None = None,
    **tags: str,
) -> Any:
    """创建带标签的 pydantic 字段配置.

    这是 Pydantic `Field` 的包装函数, 把标签与嵌入标记写入 `json_schema_extra`,
    供 `struct_fields()` 读取. dataclass 请使用 `Annotated[T, Tag(...)]`.

    Args:
        default: 字段的静态默认值.
        tag: 迷你格式字符串或 Tag.
        embed: 是否为嵌入字段.
        default_factory: 用于生成默认值的无参可调用对象.
        **tags: 额外的命名空间标签, 覆盖 `tag` 中的同名键.

    Returns:
        Any: 包含标签元数据的 Pydantic FieldInfo 对象.

    Examples:
        >>> from pydantic import BaseModel
        >>> class Query(BaseModel):
        ...     limit: int = TagField(10, query="limit", json="limit")
        ...     page: Page = TagField(default_factory=Page, embed=True)
    """
    merged = Tag.of(tag).merge(Tag(**tags))

    json_schema_extra = {
        TAG_KEY: dict(merged.items()),
        EMBED_KEY: embed,
    }

    kwargs: dict[str, Any] = {
        "json_schema_extra": json_schema_extra,
    }

    if default is not PydanticUndefined:
        kwargs["default"] = default

    if default_factory is not None:
        kwargs["default_factory"] = default_factory

    return cast(Any, Field)(**kwargs)
