"""Canned upstream payloads for test mode.

These fixtures mirror the shapes returned by TikHub and the Douyin share
page so the whole pipeline can run without network access. Used when
APP_TESTING_TEST_MODE=true.
"""

import json
from typing import Any, Dict, List, Optional

DEMO_VIDEO_ID = "7123456789012345678"

DEMO_SHARE_URL = "https://v.douyin.com/iDemo123/"

DEMO_FINAL_URL = f"https://www.iesdouyin.com/share/video/{DEMO_VIDEO_ID}/?region=CN"

CDN = "https://v26-web.douyinvod.com/demo"

# Response of the high-quality play URL endpoint
DEMO_QUALITY_DOCUMENT: Dict[str, Any] = {
    "code": 200,
    "data": {
        "original_video_url": f"{CDN}/original.mp4",
        "play_url": {
            "url_list": [f"{CDN}/play_0.mp4", f"{CDN}/play_1.mp4"],
        },
        "video_data": {
            "aweme_detail": {
                "video": {
                    "width": 1920,
                    "height": 1080,
                    "bit_rate": [
                        {
                            "gear_name": "normal_1080_0",
                            "FPS": 30,
                            "play_addr": {"url_list": [f"{CDN}/1080.mp4"]},
                        },
                        {
                            "gear_name": "normal_720_0",
                            "FPS": 30,
                            "play_addr": {"url_list": [f"{CDN}/720.mp4"]},
                        },
                    ],
                }
            }
        },
    },
}

DEMO_STATISTICS: Dict[str, Any] = {
    "aweme_id": DEMO_VIDEO_ID,
    "play_count": 1234567,
    "digg_count": 45678,
    "comment_count": 1234,
    "share_count": 567,
    "download_count": 89,
}

DEMO_STATISTICS_RESPONSE: Dict[str, Any] = {
    "code": 200,
    "data": {"statistics_list": [DEMO_STATISTICS]},
}

DEMO_PAGE_ITEM: Dict[str, Any] = {
    "aweme_id": DEMO_VIDEO_ID,
    "video": {
        "bit_rate": [
            {"gear_name": "adapt_lowest_1080_1", "play_addr": {"url_list": [f"{CDN}/page_0.mp4"]}},
            {"gear_name": "adapt_lowest_720_1", "play_addr": {"url_list": [f"{CDN}/page_1.mp4"]}},
            {"gear_name": "adapt_lowest_540_1", "play_addr": {"url_list": [f"{CDN}/page_2.mp4"]}},
        ]
    },
}

DEMO_FILE_SIZES: Dict[str, int] = {
    f"{CDN}/original.mp4": 52428800,
    f"{CDN}/1080.mp4": 31457280,
    f"{CDN}/720.mp4": 15728640,
    f"{CDN}/page_2.mp4": 7340032,
}


def page_state(item: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Wrap an item in the router state the share page embeds."""
    item_list: List[Dict[str, Any]] = [item] if item is not None else []
    return {
        "loaderData": {
            "video_(id)/page": {
                "videoInfoRes": {"item_list": item_list},
            }
        }
    }


def build_share_page(item: Optional[Dict[str, Any]] = None, variable: str = "_ROUTER_DATA") -> str:
    """Render minimal share page markup embedding ``item``."""
    state = json.dumps(page_state(item if item is not None else DEMO_PAGE_ITEM), ensure_ascii=False)
    return (
        "<!DOCTYPE html><html><head><title>抖音</title></head><body>"
        '<div id="root"></div>'
        f"<script>window.{variable} = {state}</script>"
        "</body></html>"
    )


DEMO_SHARE_PAGE = build_share_page()
