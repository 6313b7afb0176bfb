"""tagrefl 命令行工具."""

import importlib
import json
import logging
import pprint
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.text import Text
from rich.tree import Tree

from .log import format_path, logger
from .struct import StructField, is_struct_type
from .typename import type_string
from .walk import FieldPath, walk_fields_recursively, walk_tagged_fields


def _load_target(target: str) -> type:
    """按 `module:QualName` 导入结构体类型.

    Raises:
        click.BadParameter: TARGET 格式错误.
        click.ClickException: 导入失败或目标不是结构体.
    """
    module_name, sep, qualname = target.partition(":")
    if not sep or not module_name or not qualname:
        raise click.BadParameter("TARGET 格式应为 module:QualName")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise click.ClickException(f"无法导入模块 {module_name}: {e}") from e

    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise click.ClickException(f"{module_name} 中找不到 {qualname}") from e

    if not is_struct_type(obj):
        raise click.ClickException(f"{target} 不是结构体类型 (dataclass 或 pydantic 模型)")
    return obj


def _record(field: StructField, path: FieldPath, tag: str | None) -> dict[str, Any]:
    return {
        "key": format_path(path, field),
        "name": field.name,
        "tag": tag,
        "type": str(type_string(field.annotation)),
        "embedded": field.embedded,
        "depth": len(path),
    }


def _collect(cls: type, namespace: str, recursive: bool) -> list[dict[str, Any]]:
    """遍历结构体类型的零值, 收集字段记录."""
    records: list[dict[str, Any]] = []

    if recursive:

        def visit_path(value: Any, field: StructField, path: FieldPath) -> None:
            tag = field.tag.get(namespace) if namespace else None
            records.append(_record(field, path, tag))

        walk_fields_recursively(cls, visit_path)
    else:

        def visit_tagged(value: Any, field: StructField, tag: str) -> None:
            records.append(_record(field, (), tag or None))

        walk_tagged_fields(cls, visit_tagged, namespace)

    return records


def _build_rich_tree(cls: type, records: list[dict[str, Any]]) -> Tree:
    """按字段深度构建 Rich 树."""
    root = Tree(Text(type_string(cls), style="bold white"))
    branches: list[Tree] = [root]

    for record in records:
        depth = record["depth"]
        parent = branches[min(depth, len(branches) - 1)]

        label = Text()
        label.append(record["name"], style="bold blue")
        if record["tag"] is not None:
            label.append(f" -> {record['tag']}", style="green")
        label.append(f": {record['type']}", style="cyan")
        if record["embedded"]:
            label.append(" (embedded)", style="dim")

        branch = parent.add(label)
        del branches[depth + 1 :]
        branches.append(branch)

    return root


def _configure_logging(verbose: bool) -> None:
    if not verbose or any(isinstance(h, RichHandler) for h in logger.handlers):
        return
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


@click.command(help="结构体字段与标签查看工具")
@click.argument("target")
@click.option(
    "-t",
    "--tag",
    "namespace",
    default="",
    help="标签命名空间 (如 json), 为空时访问所有字段",
)
@click.option(
    "-r",
    "--recursive",
    is_flag=True,
    help="递归遍历所有嵌套结构体",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["tree", "json", "pretty"]),
    default="tree",
    show_default=True,
    help="输出格式",
)
@click.option(
    "-o",
    "--output",
    "output_file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="将输出保存到文件 (如不指定则输出到控制台)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="显示详细的遍历过程信息",
)
def cli(
    target: str,
    namespace: str,
    recursive: bool,
    output_format: str,
    output_file: Path | None,
    verbose: bool,
) -> None:
    """结构体字段与标签查看工具.

    Examples:
      # 查看 json 命名空间下可见的字段
      tagrefl myapp.models:User --tag json

      # 递归查看所有字段, 输出 JSON
      tagrefl myapp.models:User -r --format json
    """
    _configure_logging(verbose)
    cls = _load_target(target)

    if verbose:
        click.echo(f"[DEBUG] 遍历 {type_string(cls)}", err=True)

    records = _collect(cls, namespace, recursive)

    if output_format == "tree":
        tree = _build_rich_tree(cls, records)
        if output_file:
            with open(output_file, "w", encoding="utf-8") as f:
                Console(file=f).print(tree)
            click.echo(f"结果已保存到: {output_file}", err=True)
        else:
            Console().print(tree)
        return

    if output_format == "json":
        output_text = json.dumps(records, indent=2, ensure_ascii=False)
    else:
        output_text = pprint.pformat(records, width=100, sort_dicts=False)

    if output_file:
        output_file.write_text(output_text, encoding="utf-8")
        click.echo(f"结果已保存到: {output_file}", err=True)
    elif output_format == "json":
        Console().print(Syntax(output_text, "json", theme="monokai", word_wrap=True))
    else:
        # 原样输出, 避免 rich 把 [...] 当作标记
        click.echo(output_text)


def main() -> None:
    """入口函数."""
    cli()


if __name__ == "__main__":
    main()
