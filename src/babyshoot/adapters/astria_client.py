"""Astria fine-tuning and image generation API client."""

import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlencode

import httpx

logger = logging.getLogger(__name__)

_PROMPT_DEFAULTS: dict[str, object] = {
    "steps": 300,
    # Flux tunes reject cfg_scale values of 5 and above.
    "cfg_scale": 4,
    "seed": -1,
    "super_resolution": True,
    "inpaint_faces": True,
    "w": 1024,
    "h": 1024,
}


class AstriaError(RuntimeError):
    """Raised when an Astria request fails."""


class AstriaClient(Protocol):
    """Interface for Astria API interactions."""

    async def create_tune(
        self, title: str, class_name: str, image_urls: list[str]
    ) -> dict[str, object]:
        """Start fine-tuning on the given photos and return the tune."""

    async def get_tune(self, tune_id: str) -> dict[str, object]:
        """Return the current tune state."""

    async def create_prompt(
        self, tune_id: str, text: str, num_images: int = 1
    ) -> dict[str, object]:
        """Queue an image generation job on a trained tune."""

    async def get_prompt(self, tune_id: str, prompt_id: str) -> dict[str, object]:
        """Return the current prompt job state."""


@dataclass
class HttpxAstriaClient(AstriaClient):
    """HTTPX-backed Astria client."""

    api_key: str
    http_client: httpx.AsyncClient
    base_url: str = "https://api.astria.ai"
    base_tune_id: int = 1504944
    model_type: str = "lora"
    token: str = "ohwx"
    callback_base_url: str | None = None
    webhook_secret: str | None = None

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        api_key: str,
        base_url: str,
        base_tune_id: int,
        model_type: str,
        token: str,
        callback_base_url: str | None = None,
        webhook_secret: str | None = None,
    ) -> "HttpxAstriaClient":
        """Create an Astria client with a managed httpx session."""
        return cls(
            api_key=api_key,
            http_client=httpx.AsyncClient(),
            base_url=base_url,
            base_tune_id=base_tune_id,
            model_type=model_type,
            token=token,
            callback_base_url=callback_base_url,
            webhook_secret=webhook_secret,
        )

    def callback_url(self, object_type: str) -> str | None:
        """Return the webhook URL the provider should call, if configured."""
        if not self.callback_base_url:
            return None
        params = {"object": object_type}
        if self.webhook_secret:
            params["secret"] = self.webhook_secret
        base = self.callback_base_url.rstrip("/")
        return f"{base}/api/webhooks/astria?{urlencode(params)}"

    async def create_tune(
        self, title: str, class_name: str, image_urls: list[str]
    ) -> dict[str, object]:
        tune: dict[str, object] = {
            "title": title,
            "name": class_name,
            "base_tune_id": self.base_tune_id,
            "model_type": self.model_type,
            "token": self.token,
            "image_urls": image_urls,
        }
        callback = self.callback_url("tune")
        if callback:
            tune["callback"] = callback
        return await self._request("POST", "/tunes", "create_tune", {"tune": tune})

    async def get_tune(self, tune_id: str) -> dict[str, object]:
        return await self._request("GET", f"/tunes/{tune_id}", "get_tune")

    async def create_prompt(
        self, tune_id: str, text: str, num_images: int = 1
    ) -> dict[str, object]:
        prompt: dict[str, object] = {
            "text": text,
            "num_images": num_images,
            **_PROMPT_DEFAULTS,
        }
        callback = self.callback_url("prompt")
        if callback:
            prompt["callback"] = callback
        return await self._request(
            "POST", f"/tunes/{tune_id}/prompts", "create_prompt", {"prompt": prompt}
        )

    async def get_prompt(self, tune_id: str, prompt_id: str) -> dict[str, object]:
        return await self._request(
            "GET", f"/tunes/{tune_id}/prompts/{prompt_id}", "get_prompt"
        )

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        payload: dict[str, object] | None = None,
    ) -> dict[str, object]:
        try:
            response = await self.http_client.request(
                method,
                f"{self.base_url}{path}",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=30,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Astria request failed",
                extra={
                    "operation": operation,
                    "status_code": exc.response.status_code,
                    "body": exc.response.text[:500],
                },
            )
            raise AstriaError(
                f"Astria {operation} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise AstriaError(f"Astria {operation} failed: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            logger.error(
                "Astria returned a non-JSON body",
                extra={"operation": operation, "body": response.text[:500]},
            )
            raise AstriaError(f"Astria {operation} returned invalid JSON") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
