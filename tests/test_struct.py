"""测试结构体字段描述符.

覆盖 tagrefl.struct 模块的核心特性:
1. dataclass 与 pydantic 模型的字段推导
2. Annotated 元数据 (Tag / EMBED) 与 TagField
3. 继承时的字段顺序
"""

from dataclasses import dataclass, field
from typing import Annotated, ClassVar, Optional

import pytest
from pydantic import BaseModel, PrivateAttr

from tagrefl import (
    EMBED,
    EmbeddedField,
    StructExpectedError,
    StructField,
    Tag,
    TagField,
    is_struct_type,
    struct_fields,
)
from tagrefl.struct import resolved_annotations, split_annotated

# --- 辅助模型 ---


@dataclass
class Base:
    id: Annotated[int, Tag(json="id")] = 0


@dataclass
class Item(Base):
    """继承 Base 并嵌入 Base."""

    name: Annotated[str, Tag('json:"name"'), Tag(path="n")] = ""
    _base: Annotated[Optional[Base], EMBED] = None
    _secret: str = ""
    counter: ClassVar[int] = 0


class Meta(BaseModel):
    version: int = 1


class Document(BaseModel):
    """pydantic 模型: Annotated 与 TagField 混用."""

    title: Annotated[str, Tag(json="title")] = ""
    meta: Meta = TagField(default_factory=Meta, embed=True)
    body: str = TagField("", json="body", query="q")
    _cache: dict = PrivateAttr(default_factory=dict)


# --- 字段推导 ---


def test_struct_fields_dataclass() -> None:
    """struct_fields() 应按声明顺序返回字段, 基类字段在前."""
    fields = struct_fields(Item)

    assert [f.name for f in fields] == ["id", "name", "_base", "_secret"]
    assert [f.index for f in fields] == [0, 1, 2, 3]
    assert all(f.owner is Item for f in fields)


def test_struct_fields_merges_tags() -> None:
    """同一字段上的多个 Tag 元数据应合并."""
    name = struct_fields(Item)[1]

    assert name.tag == Tag(json="name", path="n")
    assert name.annotation is str


def test_struct_fields_embedded_variant() -> None:
    """带 EMBED 标记的字段应为 EmbeddedField, 并保留 Optional 注解."""
    fields = struct_fields(Item)

    assert isinstance(fields[2], EmbeddedField)
    assert fields[2].embedded
    assert fields[2].annotation == Optional[Base]
    assert not isinstance(fields[0], EmbeddedField)
    assert not fields[0].embedded


def test_struct_field_exported() -> None:
    """名称以下划线开头的字段不导出."""
    exported = {f.name: f.exported for f in struct_fields(Item)}

    assert exported == {"id": True, "name": True, "_base": False, "_secret": False}


def test_struct_field_value_of() -> None:
    """value_of() 应读取字段当前值."""
    item = Item(id=3, name="x")
    fields = struct_fields(Item)

    assert fields[0].value_of(item) == 3
    assert fields[2].value_of(item) is None
    assert StructField(name="missing", annotation=int).value_of(item) is None


def test_struct_fields_pydantic() -> None:
    """pydantic 模型应同时读取 Annotated 元数据与 TagField."""
    fields = struct_fields(Document)

    assert [f.name for f in fields] == ["title", "meta", "body", "_cache"]
    assert fields[0].tag == Tag(json="title")
    assert isinstance(fields[1], EmbeddedField)
    assert fields[1].annotation is Meta
    assert fields[2].tag == Tag(json="body", query="q")
    assert not fields[3].exported


def test_struct_fields_is_not_cached() -> None:
    """每次调用都返回相等的描述符."""
    assert struct_fields(Item) == struct_fields(Item)


@pytest.mark.parametrize("value", [int, "Item", Item(), None])
def test_struct_fields_non_struct(value: object) -> None:
    """非结构体类型应抛出 StructExpectedError."""
    with pytest.raises(StructExpectedError, match="struct expected"):
        struct_fields(value)  # type: ignore[arg-type]


# --- 辅助函数 ---


def test_is_struct_type() -> None:
    """dataclass 类与 pydantic 模型类是结构体类型, 实例不是."""
    assert is_struct_type(Item)
    assert is_struct_type(Document)
    assert not is_struct_type(Item())
    assert not is_struct_type(BaseModel.__base__)
    assert not is_struct_type(dict)


def test_split_annotated() -> None:
    """split_annotated() 应拆分 Annotated 元数据."""
    tag = Tag(json="a")

    assert split_annotated(Annotated[int, tag, EMBED]) == (int, (tag, EMBED))
    assert split_annotated(int) == (int, ())


def test_resolved_annotations_skips_pydantic_internals() -> None:
    """resolved_annotations() 不应包含 BaseModel 自身的注解."""
    names = list(resolved_annotations(Document))

    assert names == ["title", "meta", "body", "_cache"]


@dataclass
class Child(Base):
    id: Annotated[int, Tag(json="child_id")] = 0
    extra: int = 0


def test_struct_fields_redeclared_in_subclass() -> None:
    """子类重新声明的字段保留基类中的位置, 使用子类的标签."""
    fields = struct_fields(Child)

    assert [f.name for f in fields] == ["id", "extra"]
    assert fields[0].tag == Tag(json="child_id")


@dataclass
class Holder:
    items: list[int] = field(default_factory=list)


def test_struct_fields_generic_annotation() -> None:
    """泛型注解应原样保留."""
    assert struct_fields(Holder)[0].annotation == list[int]
