"""Browser and device fingerprinting for page-visit records."""
import re
from dataclasses import dataclass
from typing import Optional

from admin_analytics.core.constants import MOBILE_MAX_WIDTH, TABLET_MAX_WIDTH

# First substring match wins, so the order matters (Edge UAs also contain "Chrome").
BROWSERS = ("Chrome", "Firefox", "Safari", "Edge")
OPERATING_SYSTEMS = (
    ("Windows", "Windows"),
    ("Mac", "macOS"),
    ("Linux", "Linux"),
    ("Android", "Android"),
    ("iOS", "iOS"),
)
UNKNOWN = "Unknown"

_VERSION_RE = re.compile(r"(Chrome|Firefox|Safari|Edge)/(\d+)")


def parse_user_agent(user_agent: Optional[str]) -> dict:
    user_agent = user_agent or ""
    browser = next((name for name in BROWSERS if name in user_agent), UNKNOWN)
    os_name = next((label for needle, label in OPERATING_SYSTEMS if needle in user_agent), UNKNOWN)
    match = _VERSION_RE.search(user_agent)
    return {
        "browser_name": browser,
        "browser_version": match.group(2) if match else UNKNOWN,
        "os_name": os_name,
    }


def device_type(screen_width: int) -> str:
    if screen_width < MOBILE_MAX_WIDTH:
        return "mobile"
    if screen_width < TABLET_MAX_WIDTH:
        return "tablet"
    return "desktop"


@dataclass
class PageContext:
    """What the collector knows about the page it was started on."""

    title: str
    url: str
    referrer: Optional[str] = None
    user_agent: str = ""
    screen_width: int = 1920
    screen_height: int = 1080

    def fingerprint(self) -> dict:
        return {
            "screen_resolution": f"{self.screen_width}x{self.screen_height}",
            **parse_user_agent(self.user_agent),
            "device_type": device_type(self.screen_width),
        }
