"""结构体字段描述符模块.

结构体 (Struct) 指 dataclass 类型或 `pydantic.BaseModel` 子类.
字段的标签与嵌入标记通过 `Annotated` 元数据声明:

    @dataclass
    class Page:
        limit: Annotated[int, Tag(query="limit")] = 10

    @dataclass
    class Request:
        _page: Annotated[Page, EMBED] = field(default_factory=Page)
        id: Annotated[str, Tag('path:"id" json:"id"')] = ""

pydantic 模型还可以使用 `TagField(...)`.
"""

import dataclasses
import inspect
from typing import Annotated, Any, ClassVar, get_args, get_origin

from pydantic import BaseModel

from .exceptions import StructExpectedError
from .tag import EMBED, EMBED_KEY, TAG_KEY, Tag

# BaseModel 自身及其基类上的注解不是用户字段
_PYDANTIC_BASES = frozenset(BaseModel.__mro__)


@dataclasses.dataclass(frozen=True)
class StructField:
    """表示一个结构体字段的元数据.

    Attributes:
        name: 声明的字段名.
        annotation: 声明的类型 (去除 `Annotated` 元数据, 保留 `Optional`).
        tag: 字段标签.
        index: 在所属结构体中的声明位置.
        owner: 所属结构体类型.
    """

    name: str
    annotation: Any
    tag: Tag = dataclasses.field(default_factory=Tag)
    index: int = 0
    owner: type | None = dataclasses.field(default=None, repr=False, compare=False)

    embedded: ClassVar[bool] = False

    @property
    def exported(self) -> bool:
        """字段是否导出 (名称不以下划线开头)."""
        return not self.name.startswith("_")

    def value_of(self, obj: Any) -> Any:
        """读取 `obj` 上该字段的当前值, 未设置时返回 None."""
        return getattr(obj, self.name, None)


@dataclasses.dataclass(frozen=True)
class EmbeddedField(StructField):
    """嵌入 (匿名) 字段.

    未在当前命名空间打标签时, 其子字段会被展开到外层结构体中.
    """

    embedded: ClassVar[bool] = True


def is_struct_type(tp: Any) -> bool:
    """`tp` 是否为结构体类型 (dataclass 或 pydantic 模型类)."""
    if not isinstance(tp, type) or get_origin(tp) is not None:
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)


def split_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """拆分 `Annotated[T, *meta]`, 返回 `(T, meta)`."""
    if get_origin(annotation) is Annotated:
        args = get_args(annotation)
        return args[0], tuple(args[1:])
    return annotation, ()


def resolved_annotations(cls: type) -> dict[str, Any]:
    """按 MRO 顺序 (基类在前) 收集并求值类注解, 保留 `Annotated` 元数据."""
    annotations: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object or klass in _PYDANTIC_BASES:
            continue
        # 子类重新声明时更新类型, 但保留首次声明的位置
        for name, annotation in inspect.get_annotations(klass, eval_str=True).items():
            annotations[name] = annotation
    return annotations


def _field_names(cls: type) -> set[str]:
    if issubclass(cls, BaseModel):
        return set(cls.model_fields) | set(cls.__private_attributes__)
    return {f.name for f in dataclasses.fields(cls)}


def struct_fields(cls: type) -> tuple[StructField, ...]:
    """按声明顺序返回结构体的字段描述符.

    每次调用都重新从注解推导, 不做缓存.

    Args:
        cls: dataclass 类型或 pydantic 模型类.

    Returns:
        tuple[StructField, ...]: 字段描述符, 嵌入字段为 `EmbeddedField`.

    Raises:
        StructExpectedError: `cls` 不是结构体类型.
    """
    if not is_struct_type(cls):
        raise StructExpectedError(cls)

    names = _field_names(cls)
    model_fields = cls.model_fields if issubclass(cls, BaseModel) else {}

    fields: list[StructField] = []
    for name, annotation in resolved_annotations(cls).items():
        if name not in names:
            continue

        real_type, metadata = split_annotated(annotation)
        tag = Tag()
        embedded = False
        for meta in metadata:
            if meta is EMBED:
                embedded = True
            elif isinstance(meta, Tag):
                tag = tag.merge(meta)

        # TagField(...) 写入的元数据
        info = model_fields.get(name)
        extra = info.json_schema_extra if info is not None else None
        if isinstance(extra, dict):
            raw_tag = extra.get(TAG_KEY)
            if isinstance(raw_tag, dict):
                tag = tag.merge(Tag.of(raw_tag))
            if extra.get(EMBED_KEY):
                embedded = True

        field_cls = EmbeddedField if embedded else StructField
        fields.append(
            field_cls(
                name=name,
                annotation=real_type,
                tag=tag,
                index=len(fields),
                owner=cls,
            )
        )

    return tuple(fields)
