"""
Интеграция с build-скриптами cargo.

Рендерит шаблон скрипта компоновщика с контекстом из `CARGO_CFG_*`,
кладёт результат в `$OUT_DIR` и печатает инструкции cargo в stdout.

Контекст шаблона:
- `cfg`: все cfg-опции собираемого пакета. Имена в нижнем регистре,
  значения: строки или множества строк. Булевы cfg представлены пустой
  строкой (cargo не создаёт переменные для ложных опций).

Функции: `contains(cfg.feature, "alloc")`, `eq(cfg.target_arch, "arm")`.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional, TextIO

from .config.load import context_from_env
from .engine import render_file
from .errors import BuildEnvironmentError
from .types import RenderOptions

logger = logging.getLogger(__name__)

# В build-скриптах директивы всегда стоят на отдельных строках
BUILD_OPTIONS = RenderOptions(trim_blocks=True, lstrip_blocks=True)


def _require_env(env: Mapping[str, str], name: str, purpose: str) -> str:
    value = env.get(name)
    if not value:
        raise BuildEnvironmentError(f"{name} is not set ({purpose})")
    return value


def _template_impl(
        path_in: Path,
        name_out: str,
        *,
        add_immediately: bool,
        prefix_crate_name: bool,
        environ: Optional[Mapping[str, str]],
        out: Optional[TextIO],
) -> Path:
    env = os.environ if environ is None else environ
    stream = out or sys.stdout
    path_in = Path(path_in)

    print(f"cargo::rerun-if-changed={path_in}", file=stream)

    out_dir = _require_env(env, "OUT_DIR", "target output directory not found")

    if prefix_crate_name:
        crate_name = _require_env(env, "CARGO_PKG_NAME", "failed to retrieve cargo package name")
        script_name = f"{crate_name}_{name_out}"
    else:
        script_name = name_out

    path_out = render_file(path_in, Path(out_dir) / script_name, context_from_env(env), BUILD_OPTIONS)

    print(f"cargo::rustc-link-search={out_dir}", file=stream)
    if add_immediately:
        # Компоновщики считают файл неизвестного формата скриптом; в отличие от
        # rustc-link-arg=-T это распространяет подключение на зависимые крейты
        print(f"cargo::rustc-link-lib=dylib:+verbatim={script_name}", file=stream)

    logger.info("Linker script %s registered (immediate=%s)", script_name, add_immediately)
    return path_out


def register_template(
        path_in: Path,
        name_out: str,
        environ: Optional[Mapping[str, str]] = None,
        out: Optional[TextIO] = None,
) -> Path:
    """
    Регистрирует шаблон скрипта компоновщика.

    Скрипт только добавляется в путь поиска компоновщика: финальное
    приложение само подключает его (например, через INCLUDE в своём
    linkall.ld), управляя порядком скриптов. Имя результата:
    `<crate-name>_<name_out>` в `$OUT_DIR`.
    """
    return _template_impl(
        path_in, name_out,
        add_immediately=False, prefix_crate_name=True, environ=environ, out=out,
    )


def register_template_without_prefix(
        path_in: Path,
        name_out: str,
        environ: Optional[Mapping[str, str]] = None,
        out: Optional[TextIO] = None,
) -> Path:
    """Как register_template, но без имени крейта в имени результата."""
    return _template_impl(
        path_in, name_out,
        add_immediately=False, prefix_crate_name=False, environ=environ, out=out,
    )


def include_template(
        path_in: Path,
        name_out: str,
        environ: Optional[Mapping[str, str]] = None,
        out: Optional[TextIO] = None,
) -> Path:
    """
    Как register_template, но скрипт сразу подключается к компоновке.

    Не требует явного INCLUDE в зависимых крейтах, но и не даёт управлять
    порядком скриптов.
    """
    return _template_impl(
        path_in, name_out,
        add_immediately=True, prefix_crate_name=True, environ=environ, out=out,
    )


__all__ = [
    "BUILD_OPTIONS",
    "register_template",
    "register_template_without_prefix",
    "include_template",
]
