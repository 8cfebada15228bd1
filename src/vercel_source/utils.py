# src/vercel_source/utils.py
import importlib.metadata
import threading
from typing import Any, Dict

from vercel_source.constants import APP_NAME

# Cache for the User-Agent string to avoid repeated metadata lookups
_USER_AGENT_CACHE = None

# API request tracking for the end-of-run summary
_api_request_count = 0
_api_error_count = 0
_api_tracking_lock = threading.Lock()


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `vercel-source-downloader/{version}`, where `{version}` is the installed package version or `unknown` if the version cannot be determined.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version(APP_NAME)
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"

        _USER_AGENT_CACHE = f"{APP_NAME}/{app_version}"

    return _USER_AGENT_CACHE


def track_api_request(failed: bool = False) -> None:
    """Count one API request, and whether it failed."""
    global _api_request_count, _api_error_count
    with _api_tracking_lock:
        _api_request_count += 1
        if failed:
            _api_error_count += 1


def get_api_request_summary() -> Dict[str, Any]:
    """
    Build a summary of the API requests made during this run.

    Returns:
        summary (dict): "total_requests" and "failed_requests" counters.
    """
    with _api_tracking_lock:
        return {
            "total_requests": _api_request_count,
            "failed_requests": _api_error_count,
        }


def reset_api_tracking() -> None:
    """Reset the API request counters."""
    global _api_request_count, _api_error_count
    with _api_tracking_lock:
        _api_request_count = 0
        _api_error_count = 0
