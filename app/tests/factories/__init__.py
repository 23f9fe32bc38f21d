"""Test data factories for deterministic test data generation."""

from tests.factories.notices import (
    make_child_notice,
    make_notice_config,
    make_regulation_config,
)

__all__ = [
    "make_child_notice",
    "make_notice_config",
    "make_regulation_config",
]
