"""
Контекст конфигурации сборки для вычисления условий в шаблонах.

Контекст представляет неизменяемый снимок фактов о сборке: имя атрибута → множество
строк (например, включённые фичи) или одиночное строковое значение
(например, целевая архитектура). В условиях атрибуты адресуются через
корневое пространство имён `cfg`: `cfg.feature`, `cfg.target_arch`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Protocol

from ..errors import ContextConfigError, UnknownAttribute
from ..types import AttributeMap, AttributePath, AttributeValue

# Корневое пространство имён атрибутов в выражениях
ROOT_NAMESPACE = "cfg"


class AttributeResolver(Protocol):
    """
    Возможность разрешения точечного пути в значение атрибута.

    Вычислитель условий зависит только от этого интерфейса, а не от того,
    как встраивающая система сборки обнаруживает включённые фичи.
    """

    def resolve(self, path: AttributePath) -> AttributeValue:
        ...


def _normalize_value(name: str, value: Any) -> AttributeValue:
    """Приводит сырое значение атрибута к str или frozenset[str]."""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        items = []
        for item in value:
            if not isinstance(item, str):
                raise ContextConfigError(
                    f"Attribute '{name}' must contain only strings, got {type(item).__name__}"
                )
            items.append(item)
        return frozenset(items)
    raise ContextConfigError(
        f"Attribute '{name}' must be a string or a list of strings, got {type(value).__name__}"
    )


@dataclass(frozen=True)
class ConfigContext:
    """
    Неизменяемый снимок конфигурации сборки.

    Создаётся один раз на вызов и передаётся в вычислитель по ссылке.
    Повторный рендер с тем же контекстом всегда даёт тот же результат.
    """
    attributes: AttributeMap = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        normalized: Dict[str, AttributeValue] = {
            name: _normalize_value(name, value) for name, value in dict(self.attributes).items()
        }
        object.__setattr__(self, "attributes", MappingProxyType(normalized))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ConfigContext":
        """Строит контекст из словаря name → str | list[str]."""
        return cls(attributes=dict(mapping))

    def resolve(self, path: AttributePath) -> AttributeValue:
        """
        Разрешает путь вида ("cfg", "feature") в значение атрибута.

        Raises:
            UnknownAttribute: Если путь не имеет вид cfg.<имя> или атрибута нет
        """
        if len(path) != 2 or path[0] != ROOT_NAMESPACE or path[1] not in self.attributes:
            raise UnknownAttribute(".".join(path))
        return self.attributes[path[1]]

    def names(self) -> Iterable[str]:
        return sorted(self.attributes)

    def merged(self, other: "ConfigContext") -> "ConfigContext":
        """Новый контекст, в котором атрибуты `other` перекрывают текущие."""
        combined = dict(self.attributes)
        combined.update(other.attributes)
        return ConfigContext(attributes=combined)


__all__ = ["ROOT_NAMESPACE", "AttributeResolver", "ConfigContext"]
