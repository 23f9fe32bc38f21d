"""Pull and push of purpose translations."""

from typing import Any, Dict, List

from core.errors import TranslationFileError
from core.logging import get_module_logger
from infrastructure.i18n import read_json_file, write_json_file

logger = get_module_logger()


def map_purpose_to_translations(purpose: Dict[str, Any]) -> Dict[str, Any]:
    """Keep the translatable fields of a purpose."""
    return {
        "id": purpose.get("id"),
        "description": purpose.get("description"),
        "details": purpose.get("details"),
    }


def pull_purposes_translations(client, path) -> Dict[str, Any]:
    """Write the organization's purpose translations to a JSON file.

    The file has the shape `{"translations": {"purposes": [...]}}`.
    """
    purposes = client.list_purposes()
    content = {
        "translations": {
            "purposes": [map_purpose_to_translations(p) for p in purposes],
        }
    }
    write_json_file(path, content)
    logger.info("pulled_purposes_translations", purpose_count=len(purposes))
    return content


def read_purposes_translations(path) -> List[Dict[str, Any]]:
    """Read the purpose list of a translations file."""
    content = read_json_file(path)
    if not isinstance(content, dict):
        raise TranslationFileError(f"Expected a JSON object in {path}")
    purposes = (content.get("translations") or {}).get("purposes")
    if purposes is None:
        return []
    if not isinstance(purposes, list):
        raise TranslationFileError(f"`translations.purposes` must be a list in {path}")
    return purposes


def push_purposes_translations(client, path, dry_run: bool = False) -> List[str]:
    """PATCH every purpose of a translations file, one after the other.

    The first failing purpose aborts the run.

    Returns:
        IDs of the purposes updated (or previewed in dry-run mode).
    """
    pushed = []
    for purpose in read_purposes_translations(path):
        purpose_id = purpose.get("id")
        if dry_run:
            logger.info(
                "dry_run_purpose_preview",
                purpose_id=purpose_id,
                description=purpose.get("description"),
                details=purpose.get("details"),
            )
        else:
            try:
                client.update_purpose(
                    purpose_id, purpose.get("description"), purpose.get("details")
                )
            except Exception as e:
                logger.error("purpose_update_failed", purpose_id=purpose_id, error=str(e))
                raise
        pushed.append(purpose_id)

    logger.info("pushed_purposes_translations", purpose_ids=pushed, dry_run=dry_run)
    return pushed
