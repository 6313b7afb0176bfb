"""测试标签解析与 Tag 对象."""

import copy
import pickle

import pytest
from pydantic import BaseModel

from tagrefl import EMBED, Tag, TagField, TagSyntaxError
from tagrefl.tag import EMBED_KEY, TAG_KEY, parse_tag

# --- 迷你格式解析 ---


def test_parse_tag_basic() -> None:
    """parse_tag() 应按出现顺序返回键值对."""
    assert parse_tag('path:"b" json:"-"') == {"path": "b", "json": "-"}


def test_parse_tag_whitespace_and_empty() -> None:
    """键值对之间允许多个空白, 空字符串解析为空映射."""
    assert parse_tag("") == {}
    assert parse_tag("   ") == {}
    assert parse_tag('  a:"1"\t b:""  ') == {"a": "1", "b": ""}


def test_parse_tag_escapes() -> None:
    """值中的转义序列应被还原."""
    assert parse_tag(r'desc:"say \"hi\"\n" path:"a\\b"') == {
        "desc": 'say "hi"\n',
        "path": "a\\b",
    }


def test_parse_tag_first_occurrence_wins() -> None:
    """重复的键以第一次出现的值为准."""
    assert parse_tag('json:"a" json:"b"') == {"json": "a"}


def test_parse_tag_keeps_value_text() -> None:
    """值中的逗号选项等内容原样保留."""
    assert parse_tag('json:"name,omitempty" desc:"a b: c"') == {
        "json": "name,omitempty",
        "desc": "a b: c",
    }


@pytest.mark.parametrize(
    "raw",
    [
        "json",
        "json:a",
        'json:"a',
        ':"a"',
        'json:"a\\q"',
        'json :"a"',
        'json:"a"b',
    ],
)
def test_parse_tag_syntax_error(raw: str) -> None:
    """格式错误的标签字符串应抛出 TagSyntaxError."""
    with pytest.raises(TagSyntaxError) as exc_info:
        parse_tag(raw)

    assert exc_info.value.raw == raw
    assert repr(raw) in str(exc_info.value)


def test_tag_syntax_error_is_value_error() -> None:
    """TagSyntaxError 应同时是 ValueError."""
    with pytest.raises(ValueError, match="unterminated"):
        Tag('json:"a')


# --- Tag 对象 ---


def test_tag_get_distinguishes_absent_and_empty() -> None:
    """get() 对缺失的键返回 None, 对空值返回空字符串."""
    tag = Tag('json:"" path:"id"')

    assert tag.get("json") == ""
    assert tag.get("path") == "id"
    assert tag.get("query") is None
    assert tag.get("query", "x") == "x"


def test_tag_lookup() -> None:
    """lookup() 应返回 (值, 是否存在)."""
    tag = Tag('json:""')

    assert tag.lookup("json") == ("", True)
    assert tag.lookup("form") == ("", False)


def test_tag_keyword_arguments_override_raw() -> None:
    """关键字参数应覆盖原始字符串中的同名键."""
    tag = Tag('json:"a" path:"b"', json="c", query="q")

    assert dict(tag.items()) == {"json": "c", "path": "b", "query": "q"}
    assert list(tag.keys()) == ["json", "path", "query"]


def test_tag_rejects_non_str_values() -> None:
    """非字符串的标签值应抛出 TypeError."""
    with pytest.raises(TypeError, match="must be str"):
        Tag(json=1)  # type: ignore[arg-type]


def test_tag_mapping_protocol() -> None:
    """Tag 应支持 in / [] / len."""
    tag = Tag(json="a")

    assert "json" in tag
    assert "path" not in tag
    assert tag["json"] == "a"
    assert len(tag) == 1
    with pytest.raises(KeyError):
        tag["path"]


def test_tag_str_renders_mini_format() -> None:
    """str() 应重新生成可解析的迷你格式."""
    tag = Tag(json="a", desc='say "hi"\n')

    assert str(tag) == r'json:"a" desc:"say \"hi\"\n"'
    assert Tag(str(tag)) == tag
    assert repr(Tag(json="a")) == "Tag('json:\"a\"')"


def test_tag_equality_and_hash() -> None:
    """相同内容的 Tag 应相等且哈希一致."""
    a = Tag('json:"a" path:"b"')
    b = Tag(path="b", json="a")

    assert a == b
    assert hash(a) == hash(b)
    assert a != Tag(json="a")
    assert a != 'json:"a" path:"b"'


def test_tag_of() -> None:
    """Tag.of() 应接受 Tag / 字符串 / 映射 / None."""
    tag = Tag(json="a")

    assert Tag.of(tag) is tag
    assert Tag.of('json:"a"') == tag
    assert Tag.of({"json": "a"}) == tag
    assert Tag.of(None) == Tag()
    with pytest.raises(TypeError):
        Tag.of(1)  # type: ignore[arg-type]


def test_tag_merge_returns_new_tag() -> None:
    """merge() 应返回新 Tag, 右侧的键覆盖左侧."""
    left = Tag(json="a", path="b")
    merged = left.merge(Tag(json="c"))

    assert merged == Tag(json="c", path="b")
    assert left == Tag(json="a", path="b")


# --- EMBED 标记 ---


def test_embed_is_singleton() -> None:
    """EMBED 在拷贝与 Pickle 后仍是同一个实例."""
    assert copy.copy(EMBED) is EMBED
    assert copy.deepcopy(EMBED) is EMBED
    assert pickle.loads(pickle.dumps(EMBED)) is EMBED
    assert repr(EMBED) == "EMBED"


# --- TagField ---


class Page(BaseModel):
    limit: int = 10


class Query(BaseModel):
    q: str = TagField("", query="q", json="query")
    page: Page = TagField(default_factory=Page, embed=True)
    raw: str = TagField("x", tag='json:"raw"', json="override")


def test_tag_field_stores_metadata() -> None:
    """TagField() 应把标签与嵌入标记写入 json_schema_extra."""
    extra = Query.model_fields["q"].json_schema_extra

    assert extra == {TAG_KEY: {"query": "q", "json": "query"}, EMBED_KEY: False}
    assert Query.model_fields["page"].json_schema_extra[EMBED_KEY] is True  # type: ignore[index]


def test_tag_field_defaults() -> None:
    """TagField() 应保留默认值与 default_factory."""
    query = Query()

    assert query.q == ""
    assert query.page == Page()
    assert query.raw == "x"


def test_tag_field_keywords_override_tag() -> None:
    """TagField() 的关键字标签应覆盖 tag 参数中的同名键."""
    extra = Query.model_fields["raw"].json_schema_extra

    assert extra[TAG_KEY] == {"json": "override"}  # type: ignore[index]
