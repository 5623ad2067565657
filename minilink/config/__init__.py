from .context import ROOT_NAMESPACE, AttributeResolver, ConfigContext
from .load import DEFAULT_LIST_ATTRIBUTES, context_from_env, context_from_yaml, parse_overrides

__all__ = [
    "ROOT_NAMESPACE",
    "AttributeResolver",
    "ConfigContext",
    "DEFAULT_LIST_ATTRIBUTES",
    "context_from_env",
    "context_from_yaml",
    "parse_overrides",
]
