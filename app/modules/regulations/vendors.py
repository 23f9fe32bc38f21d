"""Vendor list update of a regulation's default configuration.

Vendors are given by their IAB TCF IDs (`{"ids": [...]}`) and translated to
the API's partner IDs before being set in `config.app.vendors.include`. The
IAB TCF integration must be enabled on the notice.
"""

import copy
from typing import Any, Dict, Iterable, List, Tuple

from core.errors import TranslationFileError
from core.logging import get_module_logger
from infrastructure.i18n import read_json_file
from modules.notices.assembler import write_back
from modules.regulations.regulations import find_default_regulation_index
from utils.paths import get_path, set_path

logger = get_module_logger()

VENDORS_PATH = "config.app.vendors.include"


def read_vendor_iab_ids(path) -> List[Any]:
    """Read the IAB vendor IDs of a `{"ids": [...]}` file."""
    content = read_json_file(path)
    ids = content.get("ids") if isinstance(content, dict) else None
    if not isinstance(ids, list):
        raise TranslationFileError(f"Expected an `ids` list in {path}")
    return ids


def map_iab_ids_to_api_ids(
    partners: Iterable[Dict[str, Any]], iab_ids: Iterable[Any]
) -> Tuple[List[str], List[Any]]:
    """Translate IAB vendor IDs to API partner IDs.

    Returns:
        The API IDs found, in the order of `iab_ids`, and the IAB IDs without
        a matching partner.
    """
    by_iab_id = {}
    for partner in partners:
        iab_id = get_path(partner, "namespaces.iab2")
        if iab_id is not None and iab_id not in by_iab_id:
            by_iab_id[iab_id] = partner["id"]

    api_ids, missing = [], []
    for iab_id in iab_ids:
        if iab_id in by_iab_id:
            api_ids.append(by_iab_id[iab_id])
        else:
            logger.error("vendor_not_found", iab_id=iab_id)
            missing.append(iab_id)
    return api_ids, missing


def update_regulation_vendors(
    client,
    notice_id: str,
    regulation_id: str,
    iab_ids: List[Any],
    partners_limit: int,
    dry_run: bool = False,
) -> List[str]:
    """Replace the vendors of a regulation's default config.

    Returns:
        The vendor IDs included after the update.
    """
    notice_config = client.get_draft_notice_config(notice_id)
    index = find_default_regulation_index(notice_config, regulation_id)
    logger.info(
        "current_vendors",
        regulation_id=regulation_id,
        vendor_ids=get_path(notice_config["regulation_configurations"][index], VENDORS_PATH),
    )

    api_ids, missing = map_iab_ids_to_api_ids(
        client.list_partners(partners_limit), iab_ids
    )
    updated = copy.deepcopy(notice_config)
    set_path(updated["regulation_configurations"][index], VENDORS_PATH, api_ids)

    if not write_back(client, updated, dry_run=dry_run):
        return api_ids

    refreshed = client.get_draft_notice_config(notice_id)
    refreshed_index = find_default_regulation_index(refreshed, regulation_id)
    included = get_path(
        refreshed["regulation_configurations"][refreshed_index], VENDORS_PATH
    ) or []
    logger.info(
        "vendors_updated",
        regulation_id=regulation_id,
        vendor_ids=included,
        missing_iab_ids=missing,
    )
    return included
