"""tagrefl 日志记录器."""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .struct import StructField

logger = logging.getLogger("tagrefl")


def format_path(
    path: Sequence["StructField"], field: "StructField | None" = None
) -> str:
    """将所有权路径格式化为组合键 (如 `Outer[Inner][Leaf]`).

    嵌入字段不参与组合键, 与属性提升的访问方式保持一致.
    """
    names = [p.name for p in path if not p.embedded]
    if field is not None:
        names.append(field.name)
    if not names:
        return ""
    return names[0] + "".join(f"[{name}]" for name in names[1:])
