"""Infrastructure modules for the consent notice tools.

Centralized infrastructure components:
- i18n: LocaleMap resolution and translation file I/O
"""
