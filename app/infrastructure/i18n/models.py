"""Locale models for translatable notice fields.

A translatable field of a notice configuration is stored as a LocaleMap:
a dict keyed by locale code ("en", "fr", "pt-BR", ...) whose values are the
translated strings.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from core.errors import ConfigurationError

LocaleMap = Dict[str, str]

DEFAULT_LOCALE = "en"


def is_locale_map(value: Any) -> bool:
    """Check whether a value looks like a LocaleMap."""
    return isinstance(value, Mapping)


def non_empty_locales(locale_map: Optional[Mapping[str, Any]]) -> List[str]:
    """Return the locales of a LocaleMap that hold a non-empty value.

    Args:
        locale_map: LocaleMap to inspect. `None` is treated as empty.

    Returns:
        Locale codes in insertion order.
    """
    if not is_locale_map(locale_map):
        return []
    return [locale for locale, text in locale_map.items() if text]


def keep_only_default_locale(
    locale_map: Optional[Mapping[str, Any]], default_locale: str = DEFAULT_LOCALE
) -> LocaleMap:
    """Return a LocaleMap reduced to its default locale entry."""
    if not is_locale_map(locale_map):
        return {default_locale: None}
    return {default_locale: locale_map.get(default_locale)}


@dataclass(frozen=True)
class LanguageSelection:
    """Languages requested on the command line.

    Attributes:
        raw: The raw `--language` value ("fr", "fr,en" or "all").
    """

    raw: str

    @property
    def is_all(self) -> bool:
        return self.raw.strip().lower() == "all"

    def resolve(self, enabled_languages: List[str]) -> List[str]:
        """Expand the selection against the notice's enabled languages.

        Args:
            enabled_languages: Languages enabled on the master notice.

        Returns:
            The languages to process, in order.

        Raises:
            ConfigurationError: If the selection is empty.
        """
        if self.is_all:
            return list(enabled_languages)
        languages = [lang.strip() for lang in self.raw.split(",") if lang.strip()]
        if not languages:
            raise ConfigurationError(
                "Please provide a language using one of the following formats: "
                "--language=fr, --language=fr,en or --language=all"
            )
        return languages
