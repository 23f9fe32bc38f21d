"""Purpose translations module."""

from modules.purposes.purposes import (
    map_purpose_to_translations,
    pull_purposes_translations,
    push_purposes_translations,
)

__all__ = [
    "map_purpose_to_translations",
    "pull_purposes_translations",
    "push_purposes_translations",
]
