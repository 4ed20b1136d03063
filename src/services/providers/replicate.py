"""Replicate provider - prediction job submission with bounded status polling."""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Sequence

import httpx

from models.image_generation import GenerationRequest, ImagePayload, JobState, JobStatus
from services.errors import ConfigError, ProviderError
from services.image_codec import ImageCodec
from services.providers.base import ImageProvider
from utils.config import REPLICATE_TOKEN_VARS, CredentialProvider, EnvCredentials, ReplicateSettings

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]

PENDING_STATUSES = (JobStatus.STARTING.value, JobStatus.PROCESSING.value)


class ReplicateProvider(ImageProvider):
    """Primary provider: Replicate predictions API.

    Submits a prediction asking the server to wait for completion. Fast jobs
    come back already terminal; slower ones are polled at a fixed interval
    for a fixed number of attempts.
    """

    def __init__(
        self,
        credentials: Optional[CredentialProvider] = None,
        settings: Optional[ReplicateSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        codec: Optional[ImageCodec] = None,
        sleep: SleepFunc = asyncio.sleep,
        timeout: float = 120.0,
    ):
        """Initialize the Replicate provider.

        Args:
            credentials: Credential lookup (defaults to the process environment).
            settings: Endpoint, model and polling settings.
            client: Shared HTTP client; a private one is created when omitted.
            codec: Codec used to materialize output references.
            sleep: Coroutine function awaited between polls (injectable for tests).
            timeout: Timeout in seconds for the private client.
        """
        self.credentials = credentials or EnvCredentials()
        self.settings = settings or ReplicateSettings()
        self._owns_client = client is None
        # Long timeout: "Prefer: wait" holds the submit request open
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self.codec = codec or ImageCodec(self.client)
        self._sleep = sleep

    @property
    def name(self) -> str:
        return "Replicate"

    def is_configured(self) -> bool:
        """Check if the Replicate API token is configured."""
        return bool(self.credentials.get(*REPLICATE_TOKEN_VARS))

    def _require_token(self) -> str:
        token = self.credentials.get(*REPLICATE_TOKEN_VARS)
        if not token:
            raise ConfigError("REPLICATE_API_TOKEN not configured. Set it in your .env file.")
        return token

    def rewrite_poll_url(self, url: str) -> str:
        """Route a provider-supplied polling URL through the configured poll base."""
        poll_base = self.settings.poll_base
        api_base = self.settings.api_base.rstrip("/")
        if poll_base and url.startswith(api_base):
            return poll_base.rstrip("/") + url[len(api_base):]
        return url

    async def generate(self, request: GenerationRequest) -> ImagePayload:
        return await self.submit_and_await(request.prompt, request.images)

    async def submit_and_await(
        self, prompt: str, images: Sequence[ImagePayload] = ()
    ) -> ImagePayload:
        """Submit a prediction and wait until it yields an image.

        Args:
            prompt: Fully built prompt text
            images: Input images (embedded or remote references)

        Returns:
            The output image in embedded form

        Raises:
            ConfigError: If REPLICATE_API_TOKEN is missing (no request is sent)
            ProviderError: On rejection, protocol violation, failure, cancellation or timeout
        """
        token = self._require_token()

        url = f"{self.settings.api_base}/v1/models/{self.settings.model}/predictions"
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Prefer": "wait",
        }

        input_payload: dict = {"prompt": prompt, "output_format": "jpg"}
        if images:
            input_payload["image_input"] = [image.data for image in images]

        logger.info(
            f"Submitting Replicate prediction ({self.settings.model}, "
            f"{len(images)} input image(s))"
        )

        start_time = time.time()

        try:
            response = await self.client.post(url, headers=headers, json={"input": input_payload})
            if not response.is_success:
                raise ProviderError(
                    f"Replicate API error: {response.status_code} - {response.text}",
                    provider=self.name,
                    status_code=response.status_code,
                    body=response.text,
                )

            state = self._parse_state(response)
            result = await self._resolve(state, token)

            generation_time_ms = int((time.time() - start_time) * 1000)
            logger.info(f"Replicate produced an image in {generation_time_ms}ms")
            return result

        except (ProviderError, ConfigError):
            raise
        except Exception as e:
            raise ProviderError(
                f"Replicate image generation failed: {e}", provider=self.name
            ) from e

    def _parse_state(self, response: httpx.Response) -> JobState:
        body = response.json()
        if not isinstance(body, dict):
            raise ProviderError(
                f"Unexpected Replicate response: expected a JSON object, got {type(body).__name__}",
                provider=self.name,
            )
        return JobState.from_response(body)

    async def _resolve(self, state: JobState, token: str) -> ImagePayload:
        """Turn the submit response into an image, polling if still pending."""
        if state.error:
            raise ProviderError(f"Replicate prediction error: {state.error}", provider=self.name)

        output_url = state.output_url()
        if state.status == JobStatus.SUCCEEDED.value and output_url:
            return await self.codec.materialize(ImagePayload.remote(output_url))

        if state.status in PENDING_STATUSES:
            if not state.poll_url:
                raise ProviderError(
                    f"Replicate returned status '{state.status}' without a polling URL",
                    provider=self.name,
                )
            logger.info(f"Replicate prediction {state.job_id or '(no id)'} is {state.status}")
            return await self._poll(state.poll_url, token)

        raise ProviderError(
            f"Unexpected Replicate response: status={state.status!r}, "
            f"output={'present' if output_url else 'missing'}",
            provider=self.name,
        )

    async def _poll(self, poll_url: str, token: str) -> ImagePayload:
        """Poll the prediction until terminal or the attempt budget is spent."""
        poll_url = self.rewrite_poll_url(poll_url)
        headers = {"Authorization": f"Bearer {token}"}
        interval = self.settings.poll_interval
        max_attempts = self.settings.max_poll_attempts

        logger.info(f"Replicate prediction pending, polling {poll_url}")

        for attempt in range(1, max_attempts + 1):
            await self._sleep(interval)

            response = await self.client.get(poll_url, headers=headers)
            if not response.is_success:
                raise ProviderError(
                    f"Replicate polling failed: {response.status_code} - {response.text}",
                    provider=self.name,
                    status_code=response.status_code,
                    body=response.text,
                )

            state = self._parse_state(response)
            logger.debug(
                f"Replicate prediction status: {state.status} (attempt {attempt}/{max_attempts})"
            )

            if state.status == JobStatus.SUCCEEDED.value:
                output_url = state.output_url()
                if not output_url:
                    raise ProviderError(
                        "Replicate prediction succeeded without an output", provider=self.name
                    )
                return await self.codec.materialize(ImagePayload.remote(output_url))

            if state.status == JobStatus.FAILED.value:
                raise ProviderError(
                    f"Replicate prediction failed: {state.error or 'Unknown error'}",
                    provider=self.name,
                )

            if state.status == JobStatus.CANCELED.value:
                raise ProviderError("Replicate prediction was canceled", provider=self.name)

        raise ProviderError(
            f"Replicate prediction timed out after {interval * max_attempts:g}s "
            f"({max_attempts} polls)",
            provider=self.name,
        )

    async def close(self) -> None:
        """Close the codec, then the HTTP client if this provider created it."""
        await self.codec.close()
        if self._owns_client:
            await self.client.aclose()
