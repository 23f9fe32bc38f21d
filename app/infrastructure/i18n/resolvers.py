"""Locale resolution for translatable notice fields.

Picks exactly one string out of a LocaleMap:

1. Specific language mode disabled: the default locale value.
2. Specific language mode enabled: the requested locale value, falling back
   to the default locale value.
3. Nothing found (or no map at all): None.
"""

from typing import Any, Mapping, Optional

import structlog
from infrastructure.i18n.models import DEFAULT_LOCALE

logger = structlog.get_logger().bind(component="i18n.resolver")


def resolve(
    locale_map: Optional[Mapping[str, Any]],
    requested_locale: Optional[str] = None,
    specific_language_mode: bool = False,
    default_locale: str = DEFAULT_LOCALE,
) -> Optional[Any]:
    """Resolve the value of a LocaleMap for a requested locale.

    Args:
        locale_map: LocaleMap to read. Missing or non-mapping values resolve to None.
        requested_locale: Locale code to look up in specific language mode.
        specific_language_mode: When False, always read the default locale.
        default_locale: Fallback locale (default: "en").

    Returns:
        The resolved value, or None.

    Example:
        >>> resolve({"en": "A", "fr": "B"}, "de", True)
        'A'
        >>> resolve({"en": "A", "fr": "B"}, "fr", True)
        'B'
    """
    if not isinstance(locale_map, Mapping):
        return None

    if specific_language_mode and requested_locale:
        value = locale_map.get(requested_locale)
        if value is not None:
            return value

    return locale_map.get(default_locale)


class LocaleResolver:
    """Resolves LocaleMap values for one run configuration.

    Binds the requested locale and the mode once so the flattening code only
    passes LocaleMaps around.
    """

    def __init__(
        self,
        requested_locale: Optional[str] = None,
        specific_language_mode: bool = False,
        default_locale: str = DEFAULT_LOCALE,
    ):
        """Initialize locale resolver.

        Args:
            requested_locale: Locale to resolve in specific language mode.
            specific_language_mode: Whether to honor `requested_locale`.
            default_locale: Fallback locale when no preference found.
        """
        self.requested_locale = requested_locale
        self.specific_language_mode = specific_language_mode
        self.default_locale = default_locale
        self.log = logger.bind(
            requested_locale=requested_locale,
            default_locale=default_locale,
        )

    @property
    def target_locale(self) -> str:
        """Locale slot written back on the write path."""
        if self.specific_language_mode and self.requested_locale:
            return self.requested_locale
        return self.default_locale

    def resolve(self, locale_map: Optional[Mapping[str, Any]]) -> Optional[Any]:
        """Resolve a LocaleMap with the bound locale and mode."""
        value = resolve(
            locale_map,
            self.requested_locale,
            self.specific_language_mode,
            self.default_locale,
        )
        if (
            value is not None
            and self.specific_language_mode
            and self.requested_locale
            and self.requested_locale != self.default_locale
            and isinstance(locale_map, Mapping)
            and locale_map.get(self.requested_locale) is None
        ):
            self.log.debug("used_default_locale_fallback")
        return value
