from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from kaisan_console.domain.errors import WebhookError

logger = logging.getLogger(__name__)

KB_WEBHOOK_URL = "https://webhooks.botvance.com.br/webhook/f733c7b6-0b5b-4ac2-9d0f-grupovalor-kb"
RESET_MEMORY_WEBHOOK_URL = (
    "https://webhooks.botvance.com.br/webhook/f1d1a201-6797-4160-8b19-kaisan-cleanmemory"
)

# payloads recorded instead of sent when WEBHOOKS_DISABLED=1
_MEM_SENT: list[dict[str, Any]] = []


def knowledge_webhook_url() -> str:
    return os.getenv("KB_WEBHOOK_URL", KB_WEBHOOK_URL)


def reset_memory_webhook_url() -> str:
    return os.getenv("RESET_MEMORY_WEBHOOK_URL", RESET_MEMORY_WEBHOOK_URL)


class WebhookNotifier:
    """One-way JSON POSTs to the agent's webhook receivers.

    Only the status code of the reply is looked at. Requests use the httpx
    default timeout and are never retried.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.disabled = os.getenv("WEBHOOKS_DISABLED", "0") == "1"
        self.transport = transport

    async def post(self, url: str, payload: dict[str, Any]) -> None:
        """Send ``payload`` and raise ``WebhookError`` unless the reply is 2xx."""
        if self.disabled and self.transport is None:
            _MEM_SENT.append({"url": url, "payload": payload})
            return
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise WebhookError(f"Webhook request failed: {exc}") from exc
        if not response.is_success:
            raise WebhookError(
                f"Webhook answered {response.status_code}", status_code=response.status_code
            )

    async def notify(self, url: str, payload: dict[str, Any]) -> bool:
        """Best-effort variant of :meth:`post`: failures are logged, never raised."""
        try:
            await self.post(url, payload)
        except WebhookError as exc:
            logger.warning("Webhook notification to %s failed: %s", url, exc)
            return False
        logger.debug("Webhook notification sent to %s", url)
        return True

    async def notify_all(self, url: str, payloads: list[dict[str, Any]]) -> int:
        """Send queued notifications in order; returns how many were delivered."""
        delivered = 0
        for payload in payloads:
            if await self.notify(url, payload):
                delivered += 1
        return delivered


def knowledge_webhook_mode() -> str:
    """``immediate`` notifies on every submit, ``deferred`` waits for an explicit save."""
    mode = os.getenv("KB_WEBHOOK_MODE", "immediate").strip().lower()
    if mode not in ("immediate", "deferred"):
        raise ValueError(f"Unsupported KB_WEBHOOK_MODE: {mode}")
    return mode
