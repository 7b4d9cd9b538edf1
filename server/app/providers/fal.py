from __future__ import annotations
import logging
from typing import Any, Dict, Optional
import httpx

from app.config import Settings
from app.providers.base import ImageEditError, ImageEditResult, MissingCredentialError

logger = logging.getLogger(__name__)

# Fixed generation parameters for FLUX.1 Kontext
GUIDANCE_SCALE = 3.5
NUM_IMAGES = 1
SAFETY_TOLERANCE = "2"
OUTPUT_FORMAT = "jpeg"


class FalProvider:
    """fal.ai client for FLUX.1 Kontext edits and fal storage uploads.

    Each edit is one synchronous request against ``fal.run``; there is no
    queue polling and no retry.
    """

    id = "fal"

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        api_key = self.settings.fal_credentials
        if not api_key:
            raise MissingCredentialError("FAL_KEY is not configured")
        return {
            "Authorization": f"Key {api_key}",
            "Content-Type": "application/json",
        }

    def _client(self, read_timeout: float) -> httpx.AsyncClient:
        timeout = httpx.Timeout(connect=10.0, read=read_timeout, write=30.0, pool=10.0)
        return httpx.AsyncClient(timeout=timeout, trust_env=True, transport=self._transport)

    async def edit_image(self, image_url: str, prompt: str) -> ImageEditResult:
        headers = self._headers()
        payload: Dict[str, Any] = {
            "prompt": prompt,
            "image_url": image_url,
            "guidance_scale": GUIDANCE_SCALE,
            "num_images": NUM_IMAGES,
            "safety_tolerance": SAFETY_TOLERANCE,
            "output_format": OUTPUT_FORMAT,
        }
        url = f"{self.settings.fal_run_url.rstrip('/')}/{self.settings.fal_model}"
        logger.info("fal edit start model=%s image=%s", self.settings.fal_model, image_url)

        try:
            async with self._client(self.settings.edit_timeout_seconds) as client:
                resp = await client.post(url, headers=headers, json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            raise ImageEditError(_friendly_status_error(e.response)) from e
        except httpx.HTTPError as e:
            raise ImageEditError(f"[fal] request failed: {e.__class__.__name__}: {e}") from e
        except ValueError as e:
            raise ImageEditError("[fal] Malformed response from image service") from e

        images = data.get("images") if isinstance(data, dict) else None
        if not images or not isinstance(images[0], dict) or not images[0].get("url"):
            raise ImageEditError("No images returned from FLUX API")

        seed = data.get("seed")
        return ImageEditResult(
            edited_image_url=images[0]["url"],
            original_image_url=image_url,
            prompt=prompt,
            seed=seed if isinstance(seed, int) else None,
        )

    async def upload_image(self, content: bytes, file_name: str, content_type: str) -> str:
        headers = self._headers()
        initiate_url = f"{self.settings.fal_storage_url.rstrip('/')}/storage/upload/initiate"
        try:
            async with self._client(60.0) as client:
                resp = await client.post(
                    initiate_url,
                    headers=headers,
                    json={"content_type": content_type, "file_name": file_name},
                )
                resp.raise_for_status()
                target = resp.json()
                upload_url = target["upload_url"]
                file_url = target["file_url"]

                put = await client.put(upload_url, content=content, headers={"Content-Type": content_type})
                put.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ImageEditError(_friendly_status_error(e.response)) from e
        except httpx.HTTPError as e:
            raise ImageEditError(f"[fal] upload failed: {e.__class__.__name__}: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            raise ImageEditError("[fal] Malformed upload response from storage service") from e

        logger.info("fal upload done file=%s bytes=%d", file_name, len(content))
        return file_url


def _friendly_status_error(response: httpx.Response) -> str:
    status = response.status_code
    if status in (401, 403):
        return "[fal] Authentication/permission issue. Check your FAL_KEY."
    if status == 429:
        return "[fal] Too many requests. Please wait a moment and try again."
    if status in (400, 422):
        message = "[fal] The image service rejected the request. Check the image URL and prompt."
        try:
            detail = response.json().get("detail")
        except Exception:
            detail = None
        if detail:
            message += f"\nProvider response: {detail}"
        return message
    return f"[fal] image service returned HTTP {status}"
