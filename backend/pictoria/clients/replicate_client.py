"""Async HTTP client for the hosted training and inference API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from pictoria.errors import UpstreamError

logger = structlog.get_logger(__name__)


@dataclass
class Training:
    id: str
    status: str


@dataclass
class Prediction:
    id: str
    status: str
    output: list[str] = field(default_factory=list)
    error: str | None = None


class ReplicateClient:
    """Thin wrapper over the provider's REST API.

    Calls are not retried; failures surface as ``UpstreamError`` flagged
    retryable where another attempt could succeed.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = "https://api.replicate.com/v1",
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Authorization": f"Bearer {api_token}"},
            transport=transport,
        )

    async def _request(self, step: str, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self.session.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("replicate.request_failed", step=step, error=str(exc))
            raise UpstreamError.from_httpx(step, exc) from exc
        return response.json()

    async def create_model(
        self,
        owner: str,
        name: str,
        *,
        visibility: str = "private",
        hardware: str = "gpu-l40s",
    ) -> dict[str, Any]:
        """Create the destination model a training writes its version into."""
        payload = await self._request(
            "replicate.create_model",
            "POST",
            "/models",
            json={"owner": owner, "name": name, "visibility": visibility, "hardware": hardware},
        )
        logger.info("replicate.model_created", owner=owner, name=name)
        return payload

    async def create_training(
        self,
        owner: str,
        model: str,
        version: str,
        *,
        destination: str,
        input: dict[str, Any],
        webhook: str | None = None,
        webhook_events_filter: list[str] | None = None,
    ) -> Training:
        """Start a fine-tuning run of ``owner/model:version`` into ``destination``."""
        body: dict[str, Any] = {"destination": destination, "input": input}
        if webhook:
            body["webhook"] = webhook
        if webhook_events_filter:
            body["webhook_events_filter"] = webhook_events_filter

        payload = await self._request(
            "replicate.create_training",
            "POST",
            f"/models/{owner}/{model}/versions/{version}/trainings",
            json=body,
        )
        training = Training(
            id=str(payload["id"]),
            status=str(payload.get("status", "starting")),
        )
        logger.info("replicate.training_created", training_id=training.id, destination=destination)
        return training

    async def get_webhook_secret(self) -> str:
        """Return the account's default webhook signing key (``whsec_...``)."""
        payload = await self._request("replicate.webhook_secret", "GET", "/webhooks/default/secret")
        key = payload.get("key")
        if not key:
            raise UpstreamError("replicate.webhook_secret", "Webhook secret response carried no key")
        return str(key)

    async def create_prediction(self, model: str, input: dict[str, Any], *, wait_seconds: int = 60) -> Prediction:
        """Run inference; ``model`` is ``owner/name`` or ``owner/name:version``.

        Uses the synchronous ``Prefer: wait`` mode so the outputs come back in
        the same response.
        """
        headers = {"Prefer": f"wait={wait_seconds}"}
        if ":" in model:
            _, version = model.split(":", 1)
            payload = await self._request(
                "replicate.create_prediction",
                "POST",
                "/predictions",
                json={"version": version, "input": input},
                headers=headers,
            )
        else:
            payload = await self._request(
                "replicate.create_prediction",
                "POST",
                f"/models/{model}/predictions",
                json={"input": input},
                headers=headers,
            )

        output = payload.get("output") or []
        if isinstance(output, str):
            output = [output]
        prediction = Prediction(
            id=str(payload.get("id", "")),
            status=str(payload.get("status", "")),
            output=[str(item) for item in output],
            error=payload.get("error"),
        )
        if prediction.status == "failed" or prediction.error:
            raise UpstreamError(
                "replicate.create_prediction",
                prediction.error or "Image generation failed",
            )
        logger.info("replicate.prediction_completed", prediction_id=prediction.id, outputs=len(prediction.output))
        return prediction

    async def download(self, url: str) -> bytes:
        """Fetch an output file from the provider's delivery URL."""
        try:
            response = await self.session.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpstreamError.from_httpx("replicate.download_output", exc) from exc
        return response.content

    async def close(self) -> None:
        await self.session.aclose()
