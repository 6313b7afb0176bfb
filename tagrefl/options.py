"""字段遍历与填充的配置选项.

该模块定义了用于控制 `walk_*` 与 `populate_fields_from_tags` 行为的选项标志.
"""

from enum import IntFlag


class Option(IntFlag):
    """tagrefl 配置选项标志.

    可以使用位运算组合多个选项:
        option = Option.SKIP_NIL_EMBEDDED | Option.CASE_SENSITIVE_KEYS
    """

    # 默认行为: 为 None 的嵌入结构体临时实例化零值后继续遍历
    NONE = 0x0000

    # 不为 None 的嵌入/嵌套结构体构造零值, 直接跳过其子字段
    SKIP_NIL_EMBEDDED = 0x0001

    # 填充字段时按大小写敏感的方式查找标签键
    CASE_SENSITIVE_KEYS = 0x0002
