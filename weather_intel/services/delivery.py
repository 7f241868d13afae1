"""Best-effort report delivery over a chain of email relays.

Strategies run one after another in a fixed order. The first one that
returns without raising wins and the rest are never called. A strategy that
raises, times out or gets a non-success answer is logged and skipped; none is
retried. When every relay has failed, ``fallback-log`` writes the email to the
log and the pipeline still reports success. Callers that need to know whether
a real relay accepted the email should look at ``DeliveryOutcome.delivered``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

import httpx

from weather_intel.core.config import Settings, settings
from weather_intel.services.email_content import OutboundEmail
from weather_intel.services.errors import DeliveryError

logger = logging.getLogger(__name__)

FALLBACK_METHOD = "fallback-log"


@dataclass
class DeliveryAttempt:
    method: str
    succeeded: bool
    error: str | None = None


@dataclass
class DeliveryOutcome:
    succeeded: bool
    method_used: str
    attempts: list[DeliveryAttempt] = field(default_factory=list)

    @property
    def delivered(self) -> bool:
        """False when only the log-only fallback ran."""
        return self.succeeded and self.method_used != FALLBACK_METHOD


DeliveryListener = Callable[[DeliveryOutcome, OutboundEmail], Any]


class DeliveryStrategy:
    """One way of getting a report to its recipient."""

    name = "base"

    def attempt(self, message: OutboundEmail) -> None:
        raise NotImplementedError


class HttpDeliveryStrategy(DeliveryStrategy):
    """Shared plumbing for relays reached with a single HTTP POST."""

    def __init__(
        self,
        endpoint: str,
        *,
        token: str = "",
        sender: str = "",
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.token = token
        self.sender = sender
        self.timeout = settings.delivery_timeout if timeout is None else timeout
        self.client = client

    def _post(self, url: str | None = None, **kwargs: Any) -> httpx.Response:
        url = url or self.endpoint
        if self.client is not None:
            return self.client.post(url, timeout=self.timeout, **kwargs)
        return httpx.post(url, timeout=self.timeout, **kwargs)

    def _require(self, value: str, what: str) -> None:
        if not value:
            raise DeliveryError(f"{self.name}: {what} not configured")

    def _check_status(self, response: httpx.Response) -> None:
        if not response.is_success:
            raise DeliveryError(f"{self.name}: HTTP {response.status_code}")

    def _check_success_flag(self, response: httpx.Response) -> None:
        self._check_status(response)
        try:
            payload = response.json()
        except ValueError as exc:
            raise DeliveryError(f"{self.name}: response was not JSON") from exc
        if not _truthy((payload or {}).get("success")):
            raise DeliveryError(f"{self.name}: relay did not confirm success")


class FormSubmitStrategy(HttpDeliveryStrategy):
    """FormSubmit AJAX endpoint; the inbox address is part of the URL."""

    name = "formsubmit"

    def __init__(self, endpoint: str, inbox: str, **kwargs: Any) -> None:
        super().__init__(endpoint, **kwargs)
        self.inbox = inbox

    def attempt(self, message: OutboundEmail) -> None:
        self._require(self.inbox, "inbox")
        data = {
            "name": message.recipient_name,
            "email": message.recipient,
            "subject": message.subject,
            "message": message.body,
            "_subject": f"Weather Report for {message.city}",
            "_captcha": "false",
            "_template": "table",
        }
        url = self.endpoint.rstrip("/") + "/" + self.inbox
        response = self._post(url, data=data, headers={"Accept": "application/json"})
        self._check_success_flag(response)


class Web3FormsStrategy(HttpDeliveryStrategy):
    name = "web3forms"

    def attempt(self, message: OutboundEmail) -> None:
        self._require(self.token, "access key")
        response = self._post(
            data={
                "access_key": self.token,
                "name": message.recipient_name,
                "email": message.recipient,
                "subject": message.subject,
                "message": message.body,
            },
            headers={"Accept": "application/json"},
        )
        self._check_success_flag(response)


class GetFormStrategy(HttpDeliveryStrategy):
    name = "getform"

    def attempt(self, message: OutboundEmail) -> None:
        self._require(self.endpoint, "form URL")
        response = self._post(
            json={
                "name": message.recipient_name,
                "email": message.recipient,
                "subject": message.subject,
                "message": message.body,
            },
            headers={"Accept": "application/json"},
        )
        self._check_status(response)


class ResendStrategy(HttpDeliveryStrategy):
    name = "resend"

    def attempt(self, message: OutboundEmail) -> None:
        self._require(self.token, "API key")
        self._require(self.sender, "sender address")
        response = self._post(
            json={
                "from": self.sender,
                "to": [message.recipient],
                "subject": message.subject,
                "text": message.body,
            },
            headers={"Authorization": f"Bearer {self.token}"},
        )
        self._check_status(response)


class LogOnlyStrategy(DeliveryStrategy):
    """Terminal strategy: writes the email to the log and never fails."""

    name = FALLBACK_METHOD

    def attempt(self, message: OutboundEmail) -> None:
        logger.info(
            "Email not relayed, logged instead\nTO: %s\nSUBJECT: %s\n\n%s",
            message.recipient,
            message.subject,
            message.body,
            extra={"recipient": message.recipient, "strategy": self.name},
        )


class DeliveryPipeline:
    def __init__(
        self,
        strategies: Sequence[DeliveryStrategy],
        fallback: DeliveryStrategy | None = None,
        listeners: Iterable[DeliveryListener] = (),
    ) -> None:
        self.strategies = list(strategies)
        self.fallback = fallback or LogOnlyStrategy()
        self.listeners = list(listeners)

    def add_listener(self, listener: DeliveryListener) -> None:
        self.listeners.append(listener)

    def deliver(self, message: OutboundEmail) -> DeliveryOutcome:
        attempts: list[DeliveryAttempt] = []
        outcome: DeliveryOutcome | None = None

        for strategy in self.strategies:
            try:
                strategy.attempt(message)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "Delivery via %s failed, trying next option: %s",
                    strategy.name,
                    exc,
                    extra={"recipient": message.recipient, "strategy": strategy.name},
                )
                attempts.append(DeliveryAttempt(method=strategy.name, succeeded=False, error=str(exc)))
                continue
            attempts.append(DeliveryAttempt(method=strategy.name, succeeded=True))
            logger.info(
                "Report sent to %s via %s",
                message.recipient,
                strategy.name,
                extra={"recipient": message.recipient, "strategy": strategy.name},
            )
            outcome = DeliveryOutcome(succeeded=True, method_used=strategy.name, attempts=attempts)
            break

        if outcome is None:
            outcome = self._run_fallback(message, attempts)

        self._notify(outcome, message)
        return outcome

    def _run_fallback(self, message: OutboundEmail, attempts: list[DeliveryAttempt]) -> DeliveryOutcome:
        try:
            self.fallback.attempt(message)
        except Exception as exc:  # noqa: BLE001
            # The contract is "never report failure"; a broken fallback is only logged
            logger.error("Fallback delivery raised: %s", exc, exc_info=True)
            attempts.append(DeliveryAttempt(method=self.fallback.name, succeeded=False, error=str(exc)))
        else:
            attempts.append(DeliveryAttempt(method=self.fallback.name, succeeded=True))
        return DeliveryOutcome(succeeded=True, method_used=self.fallback.name, attempts=attempts)

    def _notify(self, outcome: DeliveryOutcome, message: OutboundEmail) -> None:
        for listener in self.listeners:
            try:
                listener(outcome, message)
            except Exception:  # noqa: BLE001
                logger.error("Delivery listener failed", exc_info=True)


STRATEGY_FACTORIES: dict[str, Callable[[Settings, httpx.Client | None], DeliveryStrategy]] = {
    "formsubmit": lambda cfg, client: FormSubmitStrategy(
        cfg.formsubmit_url, cfg.formsubmit_inbox, timeout=cfg.delivery_timeout, client=client
    ),
    "web3forms": lambda cfg, client: Web3FormsStrategy(
        cfg.web3forms_url, token=cfg.web3forms_access_key, timeout=cfg.delivery_timeout, client=client
    ),
    "getform": lambda cfg, client: GetFormStrategy(
        cfg.getform_url, timeout=cfg.delivery_timeout, client=client
    ),
    "resend": lambda cfg, client: ResendStrategy(
        cfg.resend_api_url,
        token=cfg.resend_api_key,
        sender=_sender_identity(cfg),
        timeout=cfg.delivery_timeout,
        client=client,
    ),
}


def build_pipeline(
    config: Settings | None = None,
    client: httpx.Client | None = None,
    listeners: Iterable[DeliveryListener] = (),
) -> DeliveryPipeline:
    """Assemble the pipeline in the order named by ``delivery_strategies``."""

    config = config or settings
    strategies: list[DeliveryStrategy] = []
    for name in config.delivery_strategies:
        factory = STRATEGY_FACTORIES.get(name.strip().lower())
        if factory is None:
            logger.warning("Unknown delivery strategy %r ignored", name)
            continue
        strategies.append(factory(config, client))
    return DeliveryPipeline(strategies, listeners=listeners)


def _sender_identity(config: Settings) -> str:
    if not config.sender_email:
        return ""
    return f"{config.sender_name} <{config.sender_email}>"


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


__all__ = [
    "FALLBACK_METHOD",
    "DeliveryAttempt",
    "DeliveryOutcome",
    "DeliveryStrategy",
    "HttpDeliveryStrategy",
    "FormSubmitStrategy",
    "Web3FormsStrategy",
    "GetFormStrategy",
    "ResendStrategy",
    "LogOnlyStrategy",
    "DeliveryPipeline",
    "build_pipeline",
]
