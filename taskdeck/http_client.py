"""Shared HTTP client for outbound web-service calls."""

import requests
from requests.adapters import HTTPAdapter

USER_AGENT = "taskdeck/0.1"

_session: requests.Session | None = None


def get_session() -> requests.Session:
    """Return a shared requests.Session.

    No automatic retries: a failed lookup is reported to the caller as-is.
    Callers pass their own timeout on every request.
    """
    global _session
    if _session is None:
        _session = requests.Session()
        _session.headers["User-Agent"] = USER_AGENT
        adapter = HTTPAdapter(max_retries=0)
        _session.mount("http://", adapter)
        _session.mount("https://", adapter)
    return _session
