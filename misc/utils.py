from sys import exc_info
from traceback import format_exception
from typing import Optional

TIKTOK_DOMAIN = "tiktok.com"


def is_tiktok_url(url: Optional[str]) -> bool:
    return bool(url) and TIKTOK_DOMAIN in url


def error_catch(e):
    error_type, error_instance, tb = exc_info()
    if error_instance is None:
        error_type, error_instance, tb = type(e), e, e.__traceback__
    tb_str = format_exception(error_type, error_instance, tb)
    error_message = "".join(tb_str)
    return error_message
