"""Regulation configuration pull/push and vendor updates."""

from modules.regulations.regulations import (
    pull_regulation_config,
    push_regulation_config,
)
from modules.regulations.vendors import read_vendor_iab_ids, update_regulation_vendors

__all__ = [
    "pull_regulation_config",
    "push_regulation_config",
    "read_vendor_iab_ids",
    "update_regulation_vendors",
]
