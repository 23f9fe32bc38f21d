import pytest

from core.errors import TranslationFileError
from infrastructure.i18n import write_json_file
from modules.notices.models import ChildNoticeSpec, Macro, load_children_notices


def test_macro_locales():
    assert Macro(key="{{A}}", value={"en": "a", "fr": "b"}).locales == ["en", "fr"]
    assert Macro(key="{{A}}", value="a").locales == []
    assert Macro(key="{{A}}", value="a").is_localized is False


def test_macro_requires_key():
    with pytest.raises(ValueError):
        Macro(key="", value="a")


def test_child_notice_accepts_file_aliases():
    child = ChildNoticeSpec.model_validate(
        {"noticeId": "child", "regulationIds": ["gdpr"], "macros": []}
    )
    assert child.notice_id == "child"
    assert child.regulation_ids == ["gdpr"]


def test_load_children_notices_from_json(tmp_path):
    path = write_json_file(
        tmp_path / "macros.json",
        {
            "childrenNotices": [
                {
                    "noticeId": "child-a",
                    "regulationIds": ["gdpr"],
                    "macros": [
                        {"key": "{{BRAND}}", "value": {"en": "Acme"}},
                        {"key": "{{YEAR}}", "value": 2024},
                    ],
                }
            ]
        },
    )

    [child] = load_children_notices(path)

    assert child.notice_id == "child-a"
    assert [macro.key for macro in child.macros] == ["{{BRAND}}", "{{YEAR}}"]
    assert child.macros[1].value == 2024


def test_load_children_notices_from_yaml(tmp_path):
    path = tmp_path / "macros.yaml"
    path.write_text(
        "childrenNotices:\n"
        "  - noticeId: child-a\n"
        "    macros:\n"
        "      - key: '{{BRAND}}'\n"
        "        value: Acme\n",
        encoding="utf-8",
    )

    [child] = load_children_notices(path)

    assert child.regulation_ids == []
    assert child.macros[0].value == "Acme"


def test_load_children_notices_rejects_invalid_schema(tmp_path):
    path = write_json_file(
        tmp_path / "macros.json", {"childrenNotices": [{"macros": []}]}
    )
    with pytest.raises(TranslationFileError, match="Invalid macros file"):
        load_children_notices(path)
