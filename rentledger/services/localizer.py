"""User-facing strings (Vietnamese) looked up by dotted key.

    from rentledger.services.localizer import t

    t("labels.paid")                                  # "Đã thanh toán"
    t("errors.room_not_found", room_id="room-9")      # "Không tìm thấy phòng room-9"

Strings live in ``static/translations.json`` and are read on first use.
An unknown key comes back unchanged so a missing string never breaks a
response or an export.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

TRANSLATIONS_PATH = Path(__file__).parent.parent / "static" / "translations.json"


@lru_cache(maxsize=1)
def _translations() -> dict[str, Any]:
    try:
        with open(TRANSLATIONS_PATH, encoding="utf-8") as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.error("Failed to load translations from %s: %s", TRANSLATIONS_PATH, e)
        return {}


def t(key: str, **kwargs: Any) -> str:
    """Look up ``key`` and fill ``{placeholders}`` from kwargs."""
    node: Any = _translations()
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            logger.warning("Translation key not found: %s", key)
            return key
        node = node[part]

    if not isinstance(node, str):
        logger.warning("Translation key %s is a group, not a string", key)
        return key
    if not kwargs:
        return node

    try:
        return node.format(**kwargs)
    except KeyError as e:
        logger.warning("Missing placeholder %s for key: %s", e, key)
        return node


def payment_status_label(paid: bool) -> str:
    return t("labels.paid") if paid else t("labels.unpaid")


__all__ = ["t", "payment_status_label"]
