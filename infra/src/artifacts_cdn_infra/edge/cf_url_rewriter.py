"""Lambda@Edge viewer-request handler resolving ``/latest/`` artifact URLs.

Requests for ``<prefix>/latest/<rest>`` are redirected to the build named by
the ``latest`` field of ``<prefix>/index.json``. Every other request is passed
through untouched.

Deployed without bundled dependencies, so only the standard library is used.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.request
from typing import Any

logger = logging.getLogger()
logger.setLevel(logging.INFO)

LATEST_SEGMENT = "/latest/"
INDEX_FILE = "index.json"
FETCH_TIMEOUT_SECONDS = 3


def fetch_index(url: str) -> dict[str, Any]:
    """Fetch and decode a build ``index.json``."""
    with urllib.request.urlopen(url, timeout=FETCH_TIMEOUT_SECONDS) as response:
        return json.loads(response.read().decode("utf-8"))


def _response(status: str, description: str, headers: dict[str, str] | None = None) -> dict[str, Any]:
    cf_headers = {
        key.lower(): [{"key": key, "value": value}] for key, value in (headers or {}).items()
    }
    cf_headers["cache-control"] = [{"key": "Cache-Control", "value": "max-age=60"}]
    return {"status": status, "statusDescription": description, "headers": cf_headers}


def redirect_response(location: str) -> dict[str, Any]:
    return _response("302", "Found", {"Location": location})


def not_found_response() -> dict[str, Any]:
    return _response("404", "Not Found")


def rewrite(request: dict[str, Any]) -> dict[str, Any]:
    """Return the request to forward, or a response to send to the viewer."""
    uri: str = request["uri"]
    if LATEST_SEGMENT not in uri:
        return request

    prefix, rest = uri.split(LATEST_SEGMENT, 1)
    host = request["headers"]["host"][0]["value"]
    index_url = f"https://{host}{prefix}/{INDEX_FILE}"

    try:
        index = fetch_index(index_url)
    except (OSError, http.client.HTTPException, ValueError) as exc:
        logger.warning("index fetch failed for %s: %s", index_url, exc)
        return not_found_response()

    latest = index.get("latest") if isinstance(index, dict) else None
    if not latest:
        logger.warning("no latest build in %s", index_url)
        return not_found_response()

    location = f"{prefix}/{latest}/{rest}"
    if request.get("querystring"):
        location = f"{location}?{request['querystring']}"
    logger.info("redirecting %s to %s", uri, location)
    return redirect_response(location)


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entry point for the CloudFront viewer-request trigger."""
    return rewrite(event["Records"][0]["cf"]["request"])
