"""Parser for the state JSON embedded in the Douyin share page.

The share page (``https://www.iesdouyin.com/share/video/<id>``) bootstraps
its client from a script assigning ``window._ROUTER_DATA`` (plain JSON) or
``window._RENDER_DATA`` (percent-encoded JSON). This module is the only
place that knows about that markup.
"""

import json
import re
from typing import Any, Optional
from urllib.parse import unquote

import structlog

from douyin_api.models.payload import PageItem, dig

logger = structlog.get_logger(__name__)

PAGE_STATE_PATTERN = re.compile(
    r"window\.(?:_ROUTER_DATA|_RENDER_DATA)\s*=\s*(.*?);?\s*</script>",
    re.DOTALL,
)

ITEM_PATH = ("loaderData", "video_(id)/page", "videoInfoRes", "item_list", 0)


def _decode_state(blob: str) -> Optional[Any]:
    blob = blob.strip()
    for candidate in (blob, unquote(blob)):
        try:
            return json.loads(candidate)
        except ValueError:
            continue
    return None


def parse_page_state(html: str) -> Optional[PageItem]:
    """Extract the video item from share page markup.

    Args:
        html: Raw share page markup

    Returns:
        PageItem (empty when the state is unreadable or has no item), or
        None when the page carries no embedded state at all
    """
    if not html:
        return None

    match = PAGE_STATE_PATTERN.search(html)
    if not match:
        logger.warning("page_state_not_found", html_length=len(html))
        return None

    state = _decode_state(match.group(1))
    if state is None:
        # Proceed without the page ladder
        logger.warning("page_state_invalid_json", blob_length=len(match.group(1)))
        return PageItem()

    item = dig(state, *ITEM_PATH, default={})
    if not item:
        logger.debug("page_state_without_item")
    return PageItem(item if isinstance(item, dict) else {})
