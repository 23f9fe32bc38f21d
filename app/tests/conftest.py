from unittest.mock import MagicMock

import pytest
from tests.factories.notices import (
    make_child_notice,
    make_notice_config,
    make_regulation_config,
)


@pytest.fixture
def master_notice_config():
    return make_notice_config("master")


@pytest.fixture
def child_notice_config():
    """Child notice whose texts still hold the child's own wording."""
    return make_notice_config(
        "child-a",
        popup_text={"en": "Old welcome", "fr": "Ancien accueil"},
        regulations=[
            make_regulation_config(
                popup_text={"en": "Old cookies text", "fr": "Ancien texte"}
            )
        ],
    )


@pytest.fixture
def child_notice():
    return make_child_notice("child-a")


@pytest.fixture
def mock_client():
    """Consent API client double returning configs by notice ID.

    Tests register configs in `mock_client.configs`.
    """
    client = MagicMock()
    client.configs = {}
    client.get_draft_notice_config.side_effect = lambda notice_id: client.configs[
        notice_id
    ]
    client.get_notice.side_effect = lambda notice_id: {
        "id": notice_id,
        "name": f"Notice {notice_id}",
    }
    return client
