"""Shared HTTP helpers used by the repository clients.

Encapsulates the session, timeout and error handling so registry modules
avoid duplicating try/except blocks. Network failures are never fatal: they
are reported through return values (status 0, None, False).
"""
from __future__ import annotations

import json
import logging
import os
import threading
from typing import Any, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

_session: Optional[requests.Session] = None
_session_lock = threading.Lock()


def get_session() -> requests.Session:
    """Return the shared session, creating it with a bounded connection pool."""
    global _session  # pylint: disable=global-statement
    if _session is None:
        with _session_lock:
            if _session is None:
                session = requests.Session()
                adapter = HTTPAdapter(
                    pool_connections=Constants.HTTP_POOL_CONNECTIONS,
                    pool_maxsize=Constants.HTTP_POOL_MAXSIZE,
                )
                session.mount("https://", adapter)
                session.mount("http://", adapter)
                session.headers["User-Agent"] = "jarlock/0.1"
                _session = session
    return _session


def reset_session() -> None:
    """Close and drop the shared session (tests, config changes)."""
    global _session  # pylint: disable=global-statement
    with _session_lock:
        if _session is not None:
            _session.close()
        _session = None


def safe_get(
    url: str,
    *,
    context: str,
    session: Optional[requests.Session] = None,
    **kwargs: Any,
) -> Optional[requests.Response]:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "maven").
        session: Session override; defaults to the shared session.
        **kwargs: Passed through to ``Session.get``.

    Returns:
        The response, or None after a timeout or connection error.
    """
    safe_target = safe_url(url)
    http = session or get_session()
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context,
                ),
            )
        try:
            res = http.get(url, timeout=Constants.REQUEST_TIMEOUT, allow_redirects=True, **kwargs)
        except requests.Timeout:
            logger.warning(
                "%s request timed out after %s seconds: %s",
                context,
                Constants.REQUEST_TIMEOUT,
                safe_target,
            )
            return None
        except requests.RequestException as exc:  # includes ConnectionError
            logger.warning("%s connection error: %s", context, exc)
            return None
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context,
                ),
            )
        return res


def _decode_text(res: requests.Response) -> str:
    # requests assumes ISO-8859-1 for text/* without a charset; POMs are UTF-8 by default
    content_type = res.headers.get("Content-Type") or ""
    if "charset=" in content_type.lower():
        return res.text
    return res.content.decode("utf-8-sig", errors="replace")


def fetch_text(
    url: str,
    *,
    context: str,
    session: Optional[requests.Session] = None,
) -> Tuple[int, Optional[str]]:
    """GET a text document.

    Returns:
        Tuple of (status_code, body). Status 0 means the request never completed;
        the body is None for anything but a 200.
    """
    res = safe_get(url, context=context, session=session)
    if res is None:
        return 0, None
    if res.status_code != 200:
        return res.status_code, None
    return res.status_code, _decode_text(res)


def get_json(
    url: str,
    *,
    context: str,
    session: Optional[requests.Session] = None,
    **kwargs: Any,
) -> Tuple[int, Optional[Any]]:
    """GET and decode a JSON document.

    Returns:
        Tuple of (status_code, parsed_json_or_none).
    """
    res = safe_get(url, context=context, session=session, **kwargs)
    if res is None:
        return 0, None
    if res.status_code != 200:
        return res.status_code, None
    try:
        return res.status_code, json.loads(res.text)
    except json.JSONDecodeError:
        if is_debug_enabled(logger):
            logger.debug(
                "JSON decode error",
                extra=extra_context(
                    event="parse",
                    component="http_client",
                    action="get_json",
                    outcome="json_decode_error",
                    target=safe_url(url),
                ),
            )
        return res.status_code, None


def download_to_file(
    url: str,
    dest: str,
    *,
    context: str,
    session: Optional[requests.Session] = None,
) -> bool:
    """Stream a URL into ``dest``.

    Any partially written file is removed when the status is not 200 or the
    transfer fails midway.
    """
    res = safe_get(url, context=context, session=session, stream=True)
    if res is None:
        remove_partial(dest)
        return False
    try:
        if res.status_code != 200:
            remove_partial(dest)
            return False
        with open(dest, "wb") as fh:
            for chunk in res.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                if chunk:
                    fh.write(chunk)
        return True
    except (requests.RequestException, OSError) as exc:
        logger.warning("%s download failed for %s: %s", context, safe_url(url), exc)
        remove_partial(dest)
        return False
    finally:
        res.close()


def remove_partial(path: str) -> None:
    """Delete a partially written download; a missing file is fine."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove partial download %s: %s", path, exc)
