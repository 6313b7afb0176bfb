"""结构体标签反射工具库.

提供了基于字段标签的结构体遍历 (walk_*)、对外名称解析 (tagged)、
标签值填充 (populate_fields_from_tags) 与类型规范名称 (type_string) 功能.
"""

from .coerce import coerce, parse_bool, populate_fields_from_tags, read_tag
from .config import Config
from .exceptions import (
    AmbiguousFieldError,
    FieldNotFoundError,
    MissingFieldsError,
    PopulateError,
    ReflError,
    StructExpectedError,
    TagSyntaxError,
    TagValueError,
)
from .kinds import (
    as_,
    deep_indirect,
    find_embedded_slice_or_map,
    is_scalar,
    is_slice_or_map,
    is_struct,
    is_zero,
    no_empty_fields,
    zero_value,
)
from .log import format_path
from .options import Option
from .struct import EmbeddedField, StructField, is_struct_type, struct_fields
from .tag import EMBED, IGNORE, Tag, TagField
from .typename import TypeString, type_string
from .walk import (
    find_tagged_name,
    has_tagged_fields,
    tagged,
    walk_fields_recursively,
    walk_tagged_fields,
)

__version__ = "0.1.0"

__all__ = [
    "EMBED",
    "IGNORE",
    "AmbiguousFieldError",
    "Config",
    "EmbeddedField",
    "FieldNotFoundError",
    "MissingFieldsError",
    "Option",
    "PopulateError",
    "ReflError",
    "StructExpectedError",
    "StructField",
    "Tag",
    "TagField",
    "TagSyntaxError",
    "TagValueError",
    "TypeString",
    "__version__",
    "as_",
    "coerce",
    "deep_indirect",
    "find_embedded_slice_or_map",
    "find_tagged_name",
    "format_path",
    "has_tagged_fields",
    "is_scalar",
    "is_slice_or_map",
    "is_struct",
    "is_struct_type",
    "is_zero",
    "no_empty_fields",
    "parse_bool",
    "populate_fields_from_tags",
    "read_tag",
    "struct_fields",
    "tagged",
    "type_string",
    "walk_fields_recursively",
    "walk_tagged_fields",
    "zero_value",
]
