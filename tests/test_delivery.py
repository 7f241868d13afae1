"""Tests for the delivery pipeline and the HTTP relay strategies."""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from weather_intel.core.config import Settings
from weather_intel.services.delivery import (
    FALLBACK_METHOD,
    DeliveryPipeline,
    FormSubmitStrategy,
    GetFormStrategy,
    LogOnlyStrategy,
    ResendStrategy,
    Web3FormsStrategy,
    build_pipeline,
)
from weather_intel.services.email_content import OutboundEmail
from weather_intel.services.errors import DeliveryError

from conftest import RecordingStrategy


@pytest.fixture
def message():
    return OutboundEmail(
        recipient="jane@example.com",
        recipient_name="Jane Doe",
        subject="Weather Intelligence Report - London",
        body="Hi Jane Doe,\n\nIt is sunny.",
        city="London",
    )


class RecordingTransport:
    def __init__(self, response=None):
        self.response = response or httpx.Response(200, json={"success": True})
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return self.response

    def client(self):
        return httpx.Client(transport=httpx.MockTransport(self))


class TestDeliveryPipeline:
    def test_first_success_stops(self, message):
        first, second, third = RecordingStrategy("a"), RecordingStrategy("b"), RecordingStrategy("c")
        outcome = DeliveryPipeline([first, second, third]).deliver(message)

        assert outcome.succeeded is True
        assert outcome.method_used == "a"
        assert outcome.delivered is True
        assert len(first.calls) == 1
        assert second.calls == []
        assert third.calls == []

    def test_failures_fall_through_in_order(self, message):
        first = RecordingStrategy("a", fail=True)
        second = RecordingStrategy("b", fail=True)
        third = RecordingStrategy("c")
        outcome = DeliveryPipeline([first, second, third]).deliver(message)

        assert outcome.method_used == "c"
        assert [a.method for a in outcome.attempts] == ["a", "b", "c"]
        assert [a.succeeded for a in outcome.attempts] == [False, False, True]
        assert outcome.attempts[0].error == "a unavailable"
        assert len(first.calls) == len(second.calls) == len(third.calls) == 1

    def test_all_failing_reports_fallback_success(self, message):
        strategies = [RecordingStrategy(name, fail=True) for name in ("a", "b", "c")]
        outcome = DeliveryPipeline(strategies).deliver(message)

        assert outcome.succeeded is True
        assert outcome.method_used == FALLBACK_METHOD
        assert outcome.delivered is False
        assert all(len(s.calls) == 1 for s in strategies)

    def test_empty_pipeline_uses_fallback(self, message):
        outcome = DeliveryPipeline([]).deliver(message)
        assert outcome.succeeded is True
        assert outcome.method_used == FALLBACK_METHOD

    def test_unexpected_exception_is_isolated(self, message):
        class Exploding(RecordingStrategy):
            def attempt(self, msg):
                raise RuntimeError("kaboom")

        backup = RecordingStrategy("backup")
        outcome = DeliveryPipeline([Exploding("bad"), backup]).deliver(message)
        assert outcome.method_used == "backup"

    def test_broken_fallback_still_reports_success(self, message):
        broken = RecordingStrategy(FALLBACK_METHOD, fail=True)
        outcome = DeliveryPipeline([RecordingStrategy("a", fail=True)], fallback=broken).deliver(message)
        assert outcome.succeeded is True
        assert outcome.method_used == FALLBACK_METHOD

    def test_listeners_receive_outcome(self, message):
        events = []
        pipeline = DeliveryPipeline([RecordingStrategy("a")], listeners=[lambda o, m: events.append((o, m))])
        outcome = pipeline.deliver(message)
        assert events == [(outcome, message)]

    def test_failing_listener_does_not_change_outcome(self, message):
        def bad_listener(outcome, msg):
            raise ValueError("listener bug")

        events = []
        pipeline = DeliveryPipeline([RecordingStrategy("a")], listeners=[bad_listener])
        pipeline.add_listener(lambda o, m: events.append(o.method_used))
        outcome = pipeline.deliver(message)

        assert outcome.method_used == "a"
        assert events == ["a"]

    def test_log_only_strategy_logs_email(self, message, caplog):
        caplog.set_level("INFO", logger="weather_intel.services.delivery")
        LogOnlyStrategy().attempt(message)
        assert "jane@example.com" in caplog.text
        assert "It is sunny." in caplog.text


class TestFormSubmitStrategy:
    def test_posts_form_to_inbox_url(self, message):
        transport = RecordingTransport(httpx.Response(200, json={"success": "true"}))
        strategy = FormSubmitStrategy("https://formsubmit.co/ajax/", "reports@example.com", client=transport.client())
        strategy.attempt(message)

        request = transport.requests[0]
        assert request.url.host == "formsubmit.co"
        assert request.url.path == "/ajax/reports@example.com"
        form = parse_qs(request.content.decode())
        assert form["email"] == ["jane@example.com"]
        assert form["name"] == ["Jane Doe"]
        assert form["message"] == [message.body]
        assert form["_captcha"] == ["false"]

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json={"success": "false"}),
            httpx.Response(200, json={}),
            httpx.Response(200, text="<html>"),
            httpx.Response(500, json={"success": True}),
        ],
    )
    def test_unconfirmed_send_raises(self, message, response):
        transport = RecordingTransport(response)
        strategy = FormSubmitStrategy("https://formsubmit.co/ajax/", "reports@example.com", client=transport.client())
        with pytest.raises(DeliveryError):
            strategy.attempt(message)

    def test_missing_inbox_makes_no_request(self, message):
        transport = RecordingTransport()
        strategy = FormSubmitStrategy("https://formsubmit.co/ajax/", "", client=transport.client())
        with pytest.raises(DeliveryError):
            strategy.attempt(message)
        assert transport.requests == []


class TestOtherRelays:
    def test_web3forms_sends_access_key(self, message):
        transport = RecordingTransport(httpx.Response(200, json={"success": True}))
        Web3FormsStrategy("https://api.web3forms.com/submit", token="w3-key", client=transport.client()).attempt(
            message
        )
        form = parse_qs(transport.requests[0].content.decode())
        assert form["access_key"] == ["w3-key"]
        assert form["subject"] == [message.subject]

    def test_web3forms_without_key_makes_no_request(self, message):
        transport = RecordingTransport()
        strategy = Web3FormsStrategy("https://api.web3forms.com/submit", client=transport.client())
        with pytest.raises(DeliveryError):
            strategy.attempt(message)
        assert transport.requests == []

    def test_getform_posts_json_and_checks_status(self, message):
        transport = RecordingTransport(httpx.Response(200, text="ok"))
        GetFormStrategy("https://getform.io/f/abc", client=transport.client()).attempt(message)
        assert json.loads(transport.requests[0].content)["email"] == "jane@example.com"

        failing = RecordingTransport(httpx.Response(404, text="no such form"))
        with pytest.raises(DeliveryError):
            GetFormStrategy("https://getform.io/f/abc", client=failing.client()).attempt(message)

    def test_resend_uses_bearer_token(self, message):
        transport = RecordingTransport(httpx.Response(200, json={"id": "email_123"}))
        ResendStrategy(
            "https://api.resend.com/emails",
            token="re_key",
            sender="Weather Intelligence Hub <weather@example.com>",
            client=transport.client(),
        ).attempt(message)

        request = transport.requests[0]
        assert request.headers["Authorization"] == "Bearer re_key"
        body = json.loads(request.content)
        assert body["to"] == ["jane@example.com"]
        assert body["from"] == "Weather Intelligence Hub <weather@example.com>"
        assert body["text"] == message.body


class TestBuildPipeline:
    def test_order_follows_settings(self):
        config = Settings(delivery_strategies=("resend", "getform", "bogus", "formsubmit"))
        pipeline = build_pipeline(config)
        assert [s.name for s in pipeline.strategies] == ["resend", "getform", "formsubmit"]
        assert pipeline.fallback.name == FALLBACK_METHOD

    def test_order_from_environment_json_list(self, monkeypatch):
        monkeypatch.setenv("DELIVERY_STRATEGIES", '["resend","formsubmit"]')
        config = Settings(_env_file=None)

        assert config.delivery_strategies == ("resend", "formsubmit")
        assert [s.name for s in build_pipeline(config).strategies] == ["resend", "formsubmit"]

    def test_timeout_moves_on_to_next_relay(self, message):
        def handler(request):
            if request.url.host == "formsubmit.co":
                raise httpx.ConnectTimeout("timed out", request=request)
            return httpx.Response(200, json={"success": True})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        config = Settings(
            delivery_strategies=("formsubmit", "web3forms"),
            formsubmit_inbox="reports@example.com",
            web3forms_access_key="w3-key",
            delivery_timeout=1.0,
        )
        outcome = build_pipeline(config, client=client).deliver(message)

        assert outcome.method_used == "web3forms"
        assert outcome.attempts[0].method == "formsubmit"
        assert outcome.attempts[0].succeeded is False

    def test_unconfigured_relays_end_in_fallback(self, message):
        transport = RecordingTransport()
        config = Settings(
            formsubmit_inbox="",
            web3forms_access_key="",
            getform_url="",
            resend_api_key="",
        )
        outcome = build_pipeline(config, client=transport.client()).deliver(message)

        assert outcome.succeeded is True
        assert outcome.method_used == FALLBACK_METHOD
        assert transport.requests == []
