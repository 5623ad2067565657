"""
Точки входа конвейера: чистый рендер текста и рендер файла в файл.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config.context import AttributeResolver
from .errors import TemplateIOError
from .template.nodes import Document
from .template.parser import TemplateParser
from .template.renderer import TemplateRenderer
from .types import RenderOptions

logger = logging.getLogger(__name__)


def parse_template(text: str, options: Optional[RenderOptions] = None) -> Document:
    """Разбирает шаблон в документ без рендера (для проверки синтаксиса)."""
    return TemplateParser(text, options).parse()


def render_template(text: str, context: AttributeResolver, options: Optional[RenderOptions] = None) -> str:
    """
    Чистый вариант конвейера: текст шаблона + контекст → итоговый текст.

    Args:
        text: Текст шаблона
        context: Контекст конфигурации
        options: Настройки управления пробелами

    Returns:
        Отрендеренный текст

    Raises:
        TemplateSyntaxError: При ошибке разбора
        EvaluationError: При ошибке вычисления условия
    """
    document = parse_template(text, options)
    return TemplateRenderer(context).render(document)


def read_template(path: Path) -> str:
    # newline="" сохраняет переводы строк шаблона как есть
    try:
        with path.open("r", encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateIOError(f"Failed to read template {path}: {e}", str(path)) from e


def write_atomic(path: Path, text: str) -> None:
    """
    Атомарно записывает текст: во временный файл рядом с целью,
    затем замена. При ошибке цель остаётся нетронутой.

    Временный файл создаётся обычным open(), поэтому права результата
    определяются umask, как у любого нового файла.
    """
    path = Path(path)
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp.open("w", encoding="utf-8", newline="") as f:
            f.write(text)
        tmp.replace(path)
    except OSError as e:
        raise TemplateIOError(f"Failed to write {path}: {e}", str(path)) from e
    finally:
        if tmp.exists():
            tmp.unlink()


def render_file(
        path_in: Path,
        path_out: Path,
        context: AttributeResolver,
        options: Optional[RenderOptions] = None,
) -> Path:
    """
    Файловый вариант: читает шаблон, рендерит целиком в памяти и
    атомарно записывает результат.

    Returns:
        Путь к записанному файлу
    """
    path_in = Path(path_in)
    path_out = Path(path_out)

    text = read_template(path_in)
    rendered = render_template(text, context, options)
    write_atomic(path_out, rendered)

    logger.info("Rendered %s -> %s", path_in, path_out)
    return path_out


__all__ = [
    "parse_template",
    "render_template",
    "read_template",
    "write_atomic",
    "render_file",
]
