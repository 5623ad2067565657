from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Mapping, Tuple, Union

# ---- Aliases for clarity ----
AttributeValue = Union[FrozenSet[str], str]  # многозначный атрибут или скаляр
AttributeMap = Mapping[str, AttributeValue]
AttributePath = Tuple[str, ...]  # ("cfg", "feature")


# -----------------------------
@dataclass(frozen=True)
class RenderOptions:
    # Управление пробелами вокруг директив (как trim_blocks/lstrip_blocks в jinja)
    trim_blocks: bool = False  # убрать первый перевод строки после директивы
    lstrip_blocks: bool = False  # убрать отступ перед директивой в начале строки


DEFAULT_OPTIONS = RenderOptions()

__all__ = [
    "AttributeValue",
    "AttributeMap",
    "AttributePath",
    "RenderOptions",
    "DEFAULT_OPTIONS",
]
