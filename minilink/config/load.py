"""
Источники контекста конфигурации.

Поддерживает три источника:
- переменные окружения cargo `CARGO_CFG_<NAME>` (режим build-скрипта);
- YAML-файл с отображением name → str | list[str];
- переопределения из командной строки вида `name=value`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ..errors import ContextConfigError, TemplateIOError
from ..types import AttributeValue
from .context import ConfigContext

logger = logging.getLogger(__name__)

_yaml = YAML(typ="safe")

CARGO_CFG_PREFIX = "CARGO_CFG_"

# Атрибуты, которые всегда многозначны, даже если cargo передал одно значение
# или не передал переменную вовсе (нет включённых фич).
DEFAULT_LIST_ATTRIBUTES: FrozenSet[str] = frozenset({
    "feature",
    "target_feature",
    "target_family",
    "target_has_atomic",
})


def _split_env_value(name: str, value: str, list_attributes: FrozenSet[str]) -> AttributeValue:
    """
    Переводит значение переменной окружения в значение атрибута.

    Значения с запятыми становятся множествами; булевы cfg-флаги cargo
    передаёт пустой строкой, она сохраняется как есть.
    """
    if name in list_attributes:
        return frozenset(part for part in value.split(",") if part)
    if "," in value:
        return frozenset(value.split(","))
    return value


def context_from_env(
        environ: Optional[Mapping[str, str]] = None,
        list_attributes: Iterable[str] = DEFAULT_LIST_ATTRIBUTES,
) -> ConfigContext:
    """
    Строит контекст из переменных окружения `CARGO_CFG_*`.

    Args:
        environ: Окружение (по умолчанию os.environ)
        list_attributes: Имена атрибутов, которые всегда являются множествами

    Returns:
        Контекст с атрибутами в нижнем регистре
    """
    env = os.environ if environ is None else environ
    lists = frozenset(list_attributes)

    attributes: Dict[str, AttributeValue] = {name: frozenset() for name in lists}
    for var, value in env.items():
        if not var.startswith(CARGO_CFG_PREFIX):
            continue
        name = var[len(CARGO_CFG_PREFIX):].lower()
        attributes[name] = _split_env_value(name, value, lists)

    logger.debug("Collected %d cfg attributes from environment", len(attributes))
    return ConfigContext(attributes=attributes)


def _read_yaml_map(path: Path) -> dict:
    """Читает YAML файл и возвращает словарь."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateIOError(f"Failed to read context file {path}: {e}", str(path)) from e
    try:
        raw = _yaml.load(text) or {}
    except YAMLError as e:
        raise ContextConfigError(f"Invalid YAML in context file {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ContextConfigError(f"YAML must be a mapping: {path}")
    return raw


def _as_list_value(value: Any) -> Any:
    """Строку или пустое значение атрибута-множества превращает в множество."""
    if isinstance(value, str):
        return frozenset(part.strip() for part in value.split(",") if part.strip())
    if value is None:
        return frozenset()
    return value


def context_from_yaml(
        path: Path,
        list_attributes: Iterable[str] = DEFAULT_LIST_ATTRIBUTES,
) -> ConfigContext:
    """
    Загружает контекст из YAML-файла.

    Пример файла:
        feature: [alloc, defmt]
        target_arch: arm

    Атрибуты из `list_attributes` всегда становятся множествами:
    `feature: alloc` эквивалентно `feature: [alloc]`.
    """
    raw = _read_yaml_map(path)
    lists = frozenset(list_attributes)
    attributes: Dict[str, Any] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            raise ContextConfigError(f"Attribute names must be strings in {path}, got {key!r}")
        attributes[key] = _as_list_value(value) if key in lists else value
    context = ConfigContext.from_mapping(attributes)
    logger.debug("Loaded %d cfg attributes from %s", len(attributes), path)
    return context


def parse_overrides(
        specs: Optional[List[str]],
        list_attributes: Iterable[str] = DEFAULT_LIST_ATTRIBUTES,
) -> ConfigContext:
    """
    Парсит переопределения вида `name=value` или `name=a,b`.

    Атрибуты из `list_attributes` всегда множества (`feature=` задаёт пустое).
    Для остальных одиночное значение без запятой становится скаляром, а
    значение с запятыми множеством.
    """
    attributes: Dict[str, AttributeValue] = {}
    if not specs:
        return ConfigContext()

    lists = frozenset(list_attributes)
    for spec in specs:
        if "=" not in spec:
            raise ContextConfigError(f"Invalid cfg override '{spec}'. Expected 'name=value'")
        name, value = spec.split("=", 1)
        name = name.strip()
        if not name:
            raise ContextConfigError(f"Invalid cfg override '{spec}'. Attribute name is empty")
        if name in lists or "," in value:
            attributes[name] = frozenset(part.strip() for part in value.split(",") if part.strip())
        else:
            attributes[name] = value.strip()

    return ConfigContext(attributes=attributes)


__all__ = [
    "CARGO_CFG_PREFIX",
    "DEFAULT_LIST_ATTRIBUTES",
    "context_from_env",
    "context_from_yaml",
    "parse_overrides",
]
