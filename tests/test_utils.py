import importlib.metadata
import threading

import pytest

from vercel_source import utils

pytestmark = pytest.mark.unit


@pytest.fixture
def clear_user_agent_cache(monkeypatch):
    monkeypatch.setattr(utils, "_USER_AGENT_CACHE", None)


def test_user_agent_includes_version(clear_user_agent_cache, mocker):
    mocker.patch("importlib.metadata.version", return_value="1.2.3")

    assert utils.get_user_agent() == "vercel-source-downloader/1.2.3"


def test_user_agent_unknown_version(clear_user_agent_cache, mocker):
    mocker.patch(
        "importlib.metadata.version",
        side_effect=importlib.metadata.PackageNotFoundError,
    )

    assert utils.get_user_agent() == "vercel-source-downloader/unknown"


def test_user_agent_is_cached(clear_user_agent_cache, mocker):
    version = mocker.patch("importlib.metadata.version", return_value="1.0")

    utils.get_user_agent()
    utils.get_user_agent()

    version.assert_called_once()


class TestApiTracking:
    def test_counts_requests_and_failures(self):
        utils.track_api_request()
        utils.track_api_request(failed=True)
        utils.track_api_request()

        assert utils.get_api_request_summary() == {
            "total_requests": 3,
            "failed_requests": 1,
        }

    def test_reset(self):
        utils.track_api_request(failed=True)
        utils.reset_api_tracking()

        assert utils.get_api_request_summary() == {
            "total_requests": 0,
            "failed_requests": 0,
        }

    def test_thread_safety(self):
        def _track():
            for _ in range(100):
                utils.track_api_request()

        threads = [threading.Thread(target=_track) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert utils.get_api_request_summary()["total_requests"] == 500
