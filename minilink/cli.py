from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from .build import include_template, register_template, register_template_without_prefix
from .config.context import ConfigContext
from .config.load import context_from_env, context_from_yaml, parse_overrides
from .engine import parse_template, read_template, render_template, write_atomic
from .errors import MinilinkError
from .template.nodes import format_document_tree, iter_conditions
from .types import RenderOptions
from .version import tool_version

logger = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    if os.environ.get("MINILINK_DEBUG") or verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    root = logging.getLogger("minilink")
    root.setLevel(level)
    if not root.handlers:
        h = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(message)s")
        h.setFormatter(fmt)
        root.addHandler(h)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="minilink",
        description="Conditional templates for linker scripts",
        add_help=True,
    )
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument("-v", "--verbose", action="count", default=0, help="подробный лог (-vv для отладки)")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_whitespace(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "--trim-blocks",
            action="store_true",
            help="убирать перевод строки сразу после директивы",
        )
        sp.add_argument(
            "--lstrip-blocks",
            action="store_true",
            help="убирать отступ перед директивой в начале строки",
        )

    sp_render = sub.add_parser("render", help="Отрендерить шаблон")
    sp_render.add_argument("template", type=Path, help="путь к шаблону")
    sp_render.add_argument("-o", "--output", type=Path, help="файл результата (по умолчанию stdout)")
    sp_render.add_argument("--context", type=Path, metavar="FILE", help="YAML-файл с атрибутами cfg")
    sp_render.add_argument(
        "--cargo-env",
        action="store_true",
        help="взять атрибуты из переменных окружения CARGO_CFG_*",
    )
    sp_render.add_argument(
        "--cfg",
        action="append",
        metavar="NAME=VALUE",
        help="атрибут cfg; значения через запятую задают множество (можно указать несколько)",
    )
    add_whitespace(sp_render)

    sp_check = sub.add_parser("check", help="Проверить синтаксис шаблона без рендера")
    sp_check.add_argument("template", type=Path, help="путь к шаблону")
    sp_check.add_argument("--tree", action="store_true", help="напечатать дерево документа")
    add_whitespace(sp_check)

    sp_cargo = sub.add_parser("cargo", help="Режим build-скрипта cargo (OUT_DIR, CARGO_CFG_*)")
    sp_cargo.add_argument("template", type=Path, help="путь к шаблону")
    sp_cargo.add_argument("name", help="имя скрипта в $OUT_DIR")
    mode = sp_cargo.add_mutually_exclusive_group()
    mode.add_argument("--no-prefix", action="store_true", help="не добавлять имя крейта к имени скрипта")
    mode.add_argument("--include", action="store_true", help="сразу подключить скрипт к компоновке")

    return p


def _options(ns: argparse.Namespace) -> RenderOptions:
    return RenderOptions(
        trim_blocks=bool(getattr(ns, "trim_blocks", False)),
        lstrip_blocks=bool(getattr(ns, "lstrip_blocks", False)),
    )


def _context(ns: argparse.Namespace) -> ConfigContext:
    """Собирает контекст: окружение cargo, затем файл, затем --cfg."""
    context = ConfigContext()
    if ns.cargo_env:
        context = context.merged(context_from_env())
    if ns.context is not None:
        context = context.merged(context_from_yaml(ns.context))
    context = context.merged(parse_overrides(ns.cfg))
    logger.debug("cfg attributes: %s", ", ".join(context.names()))
    return context


def _run_cargo(ns: argparse.Namespace) -> None:
    if ns.include:
        include_template(ns.template, ns.name)
    elif ns.no_prefix:
        register_template_without_prefix(ns.template, ns.name)
    else:
        register_template(ns.template, ns.name)


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(ns.verbose)

    try:
        if ns.cmd == "render":
            text = read_template(ns.template)
            rendered = render_template(text, _context(ns), _options(ns))
            if ns.output is None:
                sys.stdout.write(rendered)
            else:
                write_atomic(ns.output, rendered)
            return 0

        if ns.cmd == "check":
            document = parse_template(read_template(ns.template), _options(ns))
            logger.info("%s: %d conditions OK", ns.template, sum(1 for _ in iter_conditions(document)))
            if ns.tree:
                sys.stdout.write(format_document_tree(document) + "\n")
            return 0

        if ns.cmd == "cargo":
            _run_cargo(ns)
            return 0

    except MinilinkError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
