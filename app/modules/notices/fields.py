"""Translatable fields of a notice configuration.

Paths are relative to a `config` object (the notice config's own `config` or
a regulation config's `config`).
"""

from typing import List, Optional

NOTICE_CONTENT_KEYS = ("popup", "notice")

# Root notice config
NOTICE_FIELDS = (
    "preferences.content.text",
    "preferences.content.title",
    "preferences.content.textVendors",
)
NOTICE_PLAIN_FIELDS = ("app.privacyPolicyURL",)

# Regulation configs
REGULATION_NOTICE_FIELDS = (
    "notice.content.deny",
    "notice.content.dismiss",
    "notice.content.learnMore",
)
REGULATION_PREFERENCES_FIELDS = (
    "preferences.content.title",
    "preferences.content.text",
    "preferences.content.agree",
    "preferences.content.disagree",
    "preferences.content.agreeToAll",
    "preferences.content.disagreeToAll",
    "preferences.content.viewAllPartners",
    "preferences.content.textVendors",
    "preferences.content.save",
    "preferences.content.subtitle",
    "preferences.content.blockVendors",
    "preferences.content.authorizeVendors",
    "preferences.content.subText",
    "preferences.content.subTextVendors",
)

CATEGORIES_PATH = "preferences.categories"
CATEGORY_FIELDS = ("name", "description")
CATEGORY_TYPE = "category"

DEFAULT_POSITION = "top"
POPUP_PLATFORMS = ("web", "amp")


def notice_content_key(position: Optional[str], platform: Optional[str] = None) -> str:
    """Key of the notice text under `notice.content` for a position.

    Web and AMP notices shown as a popup keep their text under `popup`,
    everything else under `notice`.
    """
    if position == "popup" and (platform is None or platform in POPUP_PLATFORMS):
        return "popup"
    return "notice"


def notice_text_fields(position: Optional[str] = None) -> List[str]:
    """Notice text fields for a position; both keys when the position is unknown."""
    if position is None:
        return [f"notice.content.{key}" for key in NOTICE_CONTENT_KEYS]
    return [f"notice.content.{notice_content_key(position)}"]


def root_fields(position: Optional[str] = None) -> List[str]:
    """Translatable fields of the root notice config."""
    return notice_text_fields(position) + list(NOTICE_FIELDS)


def regulation_fields(position: Optional[str] = None) -> List[str]:
    """Translatable fields of a regulation config."""
    return (
        notice_text_fields(position)
        + list(REGULATION_NOTICE_FIELDS)
        + list(REGULATION_PREFERENCES_FIELDS)
    )
