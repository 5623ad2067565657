"""
minilink: шаблоны скриптов компоновщика с условиями по конфигурации сборки.

    from minilink import ConfigContext, render_template

    ctx = ConfigContext.from_mapping({"feature": ["alloc"]})
    render_template('{% if contains(cfg.feature, "alloc") %}HEAP{% endif %}', ctx)
"""

from .config import ConfigContext, context_from_env, context_from_yaml, parse_overrides
from .engine import parse_template, render_file, render_template
from .errors import MinilinkError
from .types import RenderOptions

__all__ = [
    "ConfigContext",
    "RenderOptions",
    "MinilinkError",
    "parse_template",
    "render_template",
    "render_file",
    "context_from_env",
    "context_from_yaml",
    "parse_overrides",
]
