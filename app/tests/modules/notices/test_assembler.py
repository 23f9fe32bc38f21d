import json
from unittest.mock import MagicMock, patch

import pytest

from core.errors import LanguageNotEnabled, NoticeIdMismatch
from modules.notices import assembler
from tests.factories.notices import make_notice_config, make_regulation_config

ROOT = "notice.child-a.config"
GDPR = "notice.child-a.regulation_configurations.gdpr.config"


def make_patch(**entries):
    flat = {f"{ROOT}.notice.content.popup": "Bonjour"}
    flat.update(entries)
    return assembler.assemble(flat)


def test_validate_patch_rejects_other_notice(child_notice_config):
    patch_config = assembler.assemble({"notice.other.config.notice.content.popup": "x"})
    with pytest.raises(NoticeIdMismatch) as err:
        assembler.validate_patch(child_notice_config, patch_config, "fr")
    assert err.value.remote_notice_id == "child-a"
    assert err.value.patch_notice_id == "other"


def test_validate_patch_rejects_disabled_language(child_notice_config):
    with pytest.raises(LanguageNotEnabled) as err:
        assembler.validate_patch(child_notice_config, make_patch(), "de")
    assert err.value.language == "de"


def test_apply_patch_sets_only_the_language_slot(child_notice_config):
    updated = assembler.apply_patch(child_notice_config, make_patch(), "fr")

    assert updated["config"]["notice"]["content"]["popup"] == {
        "en": "Old welcome",
        "fr": "Bonjour",
    }
    # Fields absent from the patch are untouched
    assert updated["config"]["preferences"]["content"]["title"] == {
        "en": "Privacy settings",
        "fr": "Paramètres",
    }
    assert child_notice_config["config"]["notice"]["content"]["popup"]["fr"] == (
        "Ancien accueil"
    )


def test_apply_patch_updates_categories_by_id(child_notice_config):
    patch_config = make_patch(
        **{
            f"{ROOT}.preferences.categories.analytics.name": "Statistiques",
            f"{ROOT}.preferences.categories.unknown.name": "Ignored",
        }
    )

    updated = assembler.apply_patch(child_notice_config, patch_config, "fr")

    categories = updated["config"]["preferences"]["categories"]
    assert categories[0]["name"] == {"en": "Analytics", "fr": "Statistiques"}
    assert categories[1] == {"id": "cookies", "type": "purpose"}
    assert len(categories) == 2


def test_apply_patch_updates_default_regulation_config(child_notice_config):
    patch_config = make_patch(**{f"{GDPR}.notice.content.deny": "Non merci"})

    updated = assembler.apply_patch(child_notice_config, patch_config, "fr")

    deny = updated["regulation_configurations"][0]["config"]["notice"]["content"]["deny"]
    assert deny == {"en": "Deny", "fr": "Non merci"}


@patch("modules.notices.assembler.logger")
def test_apply_patch_skips_regulation_without_config(mock_logger):
    regulation = make_regulation_config()
    regulation["config"] = {}
    remote = make_notice_config("child-a", regulations=[regulation])
    patch_config = make_patch(**{f"{GDPR}.notice.content.deny": "Non merci"})

    updated = assembler.apply_patch(remote, patch_config, "fr")

    assert updated["regulation_configurations"][0]["config"] == {}
    mock_logger.info.assert_any_call(
        "skipped_regulation_without_config",
        notice_id="child-a",
        regulation_id="gdpr",
    )


def test_apply_patch_ignores_non_default_regulation_configs():
    remote = make_notice_config(
        "child-a", regulations=[make_regulation_config(is_default=False)]
    )
    patch_config = make_patch(**{f"{GDPR}.notice.content.deny": "Non merci"})

    updated = assembler.apply_patch(remote, patch_config, "fr")

    deny = updated["regulation_configurations"][0]["config"]["notice"]["content"]["deny"]
    assert deny == {"en": "Deny", "fr": "Refuser"}


def test_apply_patch_with_position_writes_one_text_key(child_notice_config):
    patch_config = make_patch(**{f"{ROOT}.notice.content.notice": "Bandeau"})

    updated = assembler.apply_patch(child_notice_config, patch_config, "fr", "popup")

    assert updated["config"]["notice"]["content"]["popup"]["fr"] == "Bonjour"
    assert "notice" not in updated["config"]["notice"]["content"]


def test_write_back_patches_remote_config():
    client = MagicMock()
    notice_config = {"id": "cfg-1", "notice_id": "child-a"}

    assert assembler.write_back(client, notice_config) is True

    client.update_notice_config.assert_called_once_with(notice_config)


@patch("modules.notices.assembler.logger")
def test_write_back_dry_run_logs_preview(mock_logger):
    client = MagicMock()
    notice_config = {"id": "cfg-1", "notice_id": "child-a", "text": "é"}

    assert assembler.write_back(client, notice_config, dry_run=True) is False

    client.update_notice_config.assert_not_called()
    mock_logger.info.assert_called_once_with(
        "dry_run_notice_config_preview",
        config_id="cfg-1",
        notice_id="child-a",
        notice_config=json.dumps(notice_config, ensure_ascii=False),
    )
