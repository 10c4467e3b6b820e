import importlib.metadata
import re
from typing import List, Optional, Union
from urllib.parse import urlparse

from peardb.constants import APP_NAME

_USER_AGENT_CACHE: Optional[str] = None

# Splits a string into alternating runs of digits and non-digits
_NUMERIC_RUN_RX = re.compile(r"[0-9]+|[^0-9]+")


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `peardb/{version}`, where `{version}` is the installed package version or `unknown` if the version cannot be determined.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version(APP_NAME)
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"

        _USER_AGENT_CACHE = f"{APP_NAME}/{app_version}"

    return _USER_AGENT_CACHE


def get_installed_version() -> str:
    """Return the installed peardb version, or "unknown" when not installed."""
    try:
        return importlib.metadata.version(APP_NAME)
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def is_http_url(url: str) -> bool:
    """Return True when `url` has an http(s) scheme and a host."""
    parsed_url = urlparse(url)
    return parsed_url.scheme in ("http", "https") and bool(parsed_url.netloc)


def _split_numeric_runs(value: str) -> List[Union[int, str]]:
    return [
        int(run) if run.isdigit() else run for run in _NUMERIC_RUN_RX.findall(value)
    ]


def compare_numeric(left: str, right: str) -> int:
    """
    Compare two strings the way a numeric-aware collation does.

    Runs of ASCII digits are compared by their integer value and every other
    run is compared lexically, so "10.0" sorts after "9.5" and "20A362" sorts
    before "20B82". When one string is a prefix of the other (run-wise) the
    shorter one sorts first.

    Returns:
        int: -1 if `left` sorts first, 1 if `right` sorts first, 0 if they are equal.
    """
    left_runs = _split_numeric_runs(left)
    right_runs = _split_numeric_runs(right)

    for left_run, right_run in zip(left_runs, right_runs):
        if isinstance(left_run, int) and isinstance(right_run, int):
            if left_run != right_run:
                return -1 if left_run < right_run else 1
            continue
        # A digit run against a text run compares by its text
        left_text = str(left_run)
        right_text = str(right_run)
        if left_text != right_text:
            return -1 if left_text < right_text else 1

    if len(left_runs) != len(right_runs):
        return -1 if len(left_runs) < len(right_runs) else 1
    return 0
