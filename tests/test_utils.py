import pytest

from misc.utils import error_catch, is_tiktok_url


@pytest.mark.parametrize("url, expected", [
    ("https://www.tiktok.com/@user/video/123", True),
    ("https://vm.tiktok.com/ZMabc123/", True),
    ("https://www.youtube.com/watch?v=x", False),
    ("", False),
    (None, False),
])
def test_is_tiktok_url(url, expected):
    assert is_tiktok_url(url) is expected


def test_error_catch_outside_handler():
    try:
        raise ValueError("broken payload")
    except ValueError as e:
        error = e

    text = error_catch(error)

    assert "ValueError: broken payload" in text
    assert "Traceback" in text
