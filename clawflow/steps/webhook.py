from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

import httpx

from ..contracts import WebhookStep
from ..expressions import interpolate_string, interpolate_value
from .base import BaseStepExecutor, StepResult

logger = logging.getLogger(__name__)


class WebhookExecutor(BaseStepExecutor[WebhookStep]):
    """Calls an external HTTP endpoint.

    A 2xx response is a success. Any other status is a failure that still
    carries ``{status, data}`` as output so the error can be inspected.
    """

    step_type = "webhook"

    def __init__(
        self, client: Optional[httpx.AsyncClient] = None, timeout_s: float = 30.0
    ) -> None:
        self._client = client
        self._timeout_s = timeout_s

    async def execute(self, step: WebhookStep, context: Mapping[str, Any]) -> StepResult:
        config = step.config
        if not config.url:
            return StepResult.fail("webhook requires a url")

        url = interpolate_string(config.url, context)
        body = None
        if config.body is not None:
            body = interpolate_value(config.body, context)
        headers = {"Content-Type": "application/json", **config.headers}
        content = json.dumps(body) if body is not None else None

        try:
            if self._client is not None:
                response = await self._client.request(
                    config.method, url, headers=headers, content=content,
                    timeout=self._timeout_s,
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                    response = await client.request(
                        config.method, url, headers=headers, content=content
                    )
        except httpx.HTTPError as exc:
            logger.warning(f"Webhook step {step.id} failed calling {url}: {exc}")
            return StepResult.fail(str(exc) or "Webhook failed")

        try:
            data = response.json()
        except ValueError:
            data = None

        output = {"status": response.status_code, "data": data}
        if not response.is_success:
            return StepResult.fail(f"HTTP {response.status_code}", output=output)
        return StepResult.ok(output)
