"""i18n helpers for translatable notice fields.

Main components:
- models: LocaleMap, DEFAULT_LOCALE, LanguageSelection
- resolvers: resolve() and LocaleResolver for picking one locale value
- loader: JSON/YAML translation file reading and writing
"""

from infrastructure.i18n.loader import (
    ensure_json_file,
    read_json_file,
    read_structured_file,
    write_json_file,
)
from infrastructure.i18n.models import (
    DEFAULT_LOCALE,
    LanguageSelection,
    LocaleMap,
    keep_only_default_locale,
    non_empty_locales,
)
from infrastructure.i18n.resolvers import LocaleResolver, resolve

__all__ = [
    "DEFAULT_LOCALE",
    "LanguageSelection",
    "LocaleMap",
    "LocaleResolver",
    "ensure_json_file",
    "keep_only_default_locale",
    "non_empty_locales",
    "read_json_file",
    "read_structured_file",
    "resolve",
    "write_json_file",
]
