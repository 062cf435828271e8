"""Device label derived from the User-Agent header."""

import re

DEFAULT_DEVICE = "Desktop"
DEFAULT_BROWSER = "Unknown browser"


def _has(pattern: str, user_agent: str) -> bool:
    return re.search(pattern, user_agent, re.IGNORECASE) is not None


def device_from_user_agent(user_agent: str | None) -> str:
    """Build a ``"Mobile · Chrome"`` style label.

    The label is advisory provenance shown next to a comment, not a
    security signal.
    """
    ua = user_agent or ""

    if _has("mobile", ua):
        device = "Mobile"
    elif _has("tablet", ua):
        device = "Tablet"
    else:
        device = DEFAULT_DEVICE

    if _has("chrome", ua) and not _has("edge", ua):
        browser = "Chrome"
    elif _has("firefox", ua):
        browser = "Firefox"
    elif _has("safari", ua) and not _has("chrome", ua):
        browser = "Safari"
    elif _has("edge", ua):
        browser = "Edge"
    elif _has("msie", ua) or _has("trident", ua):
        browser = "IE"
    else:
        browser = DEFAULT_BROWSER

    return f"{device} · {browser}"
