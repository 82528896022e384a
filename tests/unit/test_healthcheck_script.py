import io
import os
import sys
from urllib import error

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), os.pardir, os.pardir, "scripts"))

import healthcheck  # noqa: E402


class _Response(io.BytesIO):
    def __init__(self, status, body):
        super().__init__(body)
        self.status = status

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


@pytest.mark.unit
def test_healthcheck_passes_on_ok(monkeypatch):
    seen = []

    def _urlopen(url, timeout):
        seen.append(url)
        return _Response(200, b'{"status": "ok", "checks": {}}')

    monkeypatch.setenv("PORT", "5055")
    monkeypatch.setattr(healthcheck.request, "urlopen", _urlopen)

    assert healthcheck.main() == 0
    assert seen == ["http://127.0.0.1:5055/healthz"]


@pytest.mark.unit
@pytest.mark.parametrize(
    "status, body",
    [(200, b'{"status": "degraded"}'), (200, b"<html>"), (503, b'{"status": "degraded"}')],
)
def test_healthcheck_fails_when_unhealthy(monkeypatch, status, body):
    monkeypatch.setattr(healthcheck.request, "urlopen", lambda url, timeout: _Response(status, body))

    assert healthcheck.main() == 1


@pytest.mark.unit
def test_healthcheck_fails_when_unreachable(monkeypatch):
    def _refuse(url, timeout):
        raise error.URLError("connection refused")

    monkeypatch.setattr(healthcheck.request, "urlopen", _refuse)

    assert healthcheck.main() == 1
