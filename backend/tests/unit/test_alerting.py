import httpx

from scripts.futures_curve_scraper import alerting
from scripts.futures_curve_scraper.alerting import (
    AlertLevel,
    build_payload,
    send_slack_alert,
)


def test_payload_shape():
    payload = build_payload(AlertLevel.WARNING, "2 skipped", "CL: grid missing")
    attachment = payload["attachments"][0]
    assert attachment["color"] == "#ff9900"
    assert attachment["title"] == ":warning: 2 skipped"
    assert attachment["text"] == "CL: grid missing"


def test_no_webhook_is_noop(monkeypatch):
    monkeypatch.delenv("SLACK_WEBHOOK_URL", raising=False)
    assert send_slack_alert(AlertLevel.SUCCESS, "ok", "done") is False


def _patch_transport(monkeypatch, handler):
    real_client = httpx.Client
    monkeypatch.setattr(
        alerting.httpx,
        "Client",
        lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
    )


def test_posts_to_webhook(monkeypatch):
    monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.slack.test/T000")
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, text="ok")

    _patch_transport(monkeypatch, handler)

    assert send_slack_alert(AlertLevel.CRITICAL, "failed", "boom") is True
    assert len(requests) == 1
    assert requests[0].url == "https://hooks.slack.test/T000"


def test_webhook_error_returns_false(monkeypatch):
    monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.slack.test/T000")
    _patch_transport(monkeypatch, lambda request: httpx.Response(500))

    assert send_slack_alert(AlertLevel.CRITICAL, "failed", "boom") is False
