"""Unit tests for the User-Agent device label."""

import pytest

from guestbook.interface.api.device import device_from_user_agent


@pytest.mark.parametrize(
    ("user_agent", "label"),
    [
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:127.0) Gecko/20100101 Firefox/127.0",
            "Desktop · Firefox",
        ),
        (
            "Mozilla/5.0 (iPhone; CPU iPhone OS 17_5 like Mac OS X) AppleWebKit/605.1.15 "
            "(KHTML, like Gecko) Version/17.5 Mobile/15E148 Safari/604.1",
            "Mobile · Safari",
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_5) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/126.0 Safari/537.36",
            "Desktop · Chrome",
        ),
        ("Mozilla/5.0 (Windows NT 6.1; Trident/7.0; rv:11.0) like Gecko", "Desktop · IE"),
        ("Mozilla/5.0 (Linux; Tablet; rv:120.0) Gecko Firefox/120.0", "Tablet · Firefox"),
    ],
)
def test_device_label(user_agent, label):
    assert device_from_user_agent(user_agent) == label


def test_missing_user_agent():
    assert device_from_user_agent(None) == "Desktop · Unknown browser"
