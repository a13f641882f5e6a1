"""Validates a visualize request and runs it through the provider fallback chain."""

from __future__ import annotations

import asyncio
import binascii
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from google import genai

from src.config.options import Options
from src.config.settings import Settings
from src.handlers.error_handler import VisualizeError
from src.models.visualize import ProviderResult, VisualizeRequest, VisualizeResponse
from src.services.visualize_service.providers import (
    GeminiImageProvider,
    GeminiRestProvider,
    GeminiTextProvider,
    MockProvider,
    OpenAITextProvider,
    TEXT_MODALITY,
    VisualizationProvider,
)
from src.utility.utils import Helper
from src.utility.logger import AppLogger

logger = AppLogger.get_logger(__name__)

ALLOWED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp")
PRIMARY_IMAGE_SIZE = "2K"

MISSING_KEY_MESSAGE = (
    "Gemini API key not configured. Please add GEMINI_API_KEY to your "
    "environment variables."
)
NO_IMAGE_MESSAGE = "No image provided"
INVALID_STYLE_MESSAGE = "Invalid lighting style selected"
INVALID_IMAGE_MESSAGE = "Invalid image format. Please upload a JPEG, PNG, or WebP image."
IMAGE_TOO_LARGE_MESSAGE = "Image is too large. Please upload an image under {limit}MB."
IMAGE_SUCCESS_MESSAGE = "Visualization generated successfully!"
DESCRIPTION_SUCCESS_MESSAGE = "Here's how professional lighting would transform your home."
EXHAUSTED_MESSAGE = (
    "Unable to generate visualization. Please try again or contact us for a "
    "free in-person demonstration."
)


@dataclass
class Stage:
    """One ordered attempt of the fallback chain."""

    label: str
    provider: VisualizationProvider
    describe: bool = False

    @property
    def model(self) -> str:
        return self.provider.name


StageBuilder = Callable[[Settings, Optional[str]], List[Stage]]


def build_stages(settings: Settings, aspect_ratio: Optional[str] = None) -> List[Stage]:
    """
    Build the three stages from settings:
    primary image model, faster image model, text-only description.
    """
    if settings.is_mock:
        return [
            Stage("A", MockProvider("mock-primary-image")),
            Stage("B", MockProvider("mock-secondary-image")),
            Stage("C", MockProvider("mock-description", returns_image=False), describe=True),
        ]

    api_key = settings.gemini_api_key
    if settings.gemini_transport == "rest":
        stage_a = GeminiRestProvider(
            api_key,
            settings.primary_image_model,
            settings.gemini_base_url,
            aspect_ratio=aspect_ratio,
            timeout=settings.stage_timeout_seconds,
        )
        stage_b = GeminiRestProvider(
            api_key,
            settings.secondary_image_model,
            settings.gemini_base_url,
            timeout=settings.stage_timeout_seconds,
        )
        stage_c: VisualizationProvider = GeminiRestProvider(
            api_key,
            settings.description_model,
            settings.gemini_base_url,
            modalities=TEXT_MODALITY,
            timeout=settings.stage_timeout_seconds,
        )
    else:
        client = genai.Client(api_key=api_key)
        stage_a = GeminiImageProvider(
            client,
            settings.primary_image_model,
            aspect_ratio=aspect_ratio,
            image_size=PRIMARY_IMAGE_SIZE,
        )
        stage_b = GeminiImageProvider(client, settings.secondary_image_model)
        stage_c = GeminiTextProvider(client, settings.description_model)

    if settings.text_provider == "openai":
        stage_c = OpenAITextProvider(
            settings.openai_api_key, settings.openai_description_model
        )

    return [
        Stage("A", stage_a),
        Stage("B", stage_b),
        Stage("C", stage_c, describe=True),
    ]


class Visualizer:
    """Turns an uploaded home photo into a night-time lighting visualization.

    Checks run in a fixed order (credential, image, style, image payload),
    then each stage is tried exactly once, sequentially. A stage that raises,
    times out or returns nothing usable hands over to the next one; only
    running out of stages is reported to the caller.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        options: Optional[Options] = None,
        stage_builder: StageBuilder = build_stages,
    ):
        self.settings = settings
        self.options = options or Options()
        self.stage_builder = stage_builder
        self.utility = Helper()

    def _check_image(
        self, request: VisualizeRequest, settings: Settings
    ) -> Tuple[str, str]:
        """
        Validate the uploaded payload.
        Returns the canonical base64 (no data-URI prefix) and the closest aspect ratio.
        """
        if request.resolved_mime_type not in ALLOWED_MIME_TYPES:
            raise VisualizeError(INVALID_IMAGE_MESSAGE, 400, "invalid_image")
        try:
            raw = self.utility.decode_b64(request.image)
        except (binascii.Error, ValueError):
            raise VisualizeError(INVALID_IMAGE_MESSAGE, 400, "invalid_image")

        if len(raw) > settings.max_image_bytes:
            limit_mb = max(1, settings.max_image_bytes // (1024 * 1024))
            raise VisualizeError(
                IMAGE_TOO_LARGE_MESSAGE.format(limit=limit_mb), 400, "image_too_large"
            )

        size = self.utility.read_image_size(raw)
        if size is None:
            raise VisualizeError(INVALID_IMAGE_MESSAGE, 400, "invalid_image")
        return self.utility.encode_b64(raw), self.utility.closest_aspect_ratio(*size)

    async def visualize(self, request: VisualizeRequest) -> VisualizeResponse:
        """Validate the request and return the first usable stage result."""
        settings = self.settings or Settings.from_env()

        if not settings.gemini_api_key:
            logger.error("GEMINI_API_KEY not found")
            raise VisualizeError(MISSING_KEY_MESSAGE, 500, "configuration_error")
        if not request.image:
            raise VisualizeError(NO_IMAGE_MESSAGE, 400, "missing_image")
        prompt = self.options.get_prompt(request.style)
        if prompt is None:
            raise VisualizeError(INVALID_STYLE_MESSAGE, 400, "invalid_style")

        image_b64, aspect_ratio = self._check_image(request, settings)
        stages = self.stage_builder(settings, aspect_ratio)

        logger.info(
            "Visualizing style=%s mime=%s aspect_ratio=%s",
            request.style,
            request.resolved_mime_type,
            aspect_ratio,
        )
        return await self.run_chain(
            stages,
            prompt=prompt,
            image_b64=image_b64,
            mime_type=request.resolved_mime_type,
            timeout=settings.stage_timeout_seconds,
        )

    async def run_chain(
        self,
        stages: List[Stage],
        prompt: str,
        image_b64: str,
        mime_type: str,
        timeout: Optional[float] = None,
    ) -> VisualizeResponse:
        """Try each stage once, in order, and return the first usable result."""
        for stage in stages:
            stage_prompt = (
                self.options.build_description_prompt(prompt) if stage.describe else prompt
            )
            logger.info("Stage %s: trying %s", stage.label, stage.model)
            try:
                result: ProviderResult = await asyncio.wait_for(
                    stage.provider.generate(stage_prompt, image_b64, mime_type),
                    timeout=timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Stage %s (%s) timed out after %ss", stage.label, stage.model, timeout
                )
                continue
            except Exception as e:
                logger.warning("Stage %s (%s) failed: %s", stage.label, stage.model, e)
                continue

            if result is not None and result.has_image:
                logger.info("Stage %s (%s) returned an image", stage.label, stage.model)
                return VisualizeResponse(
                    result_image=result.image,
                    text_description=result.text if result.has_text else None,
                    message=IMAGE_SUCCESS_MESSAGE,
                    model=stage.model,
                )
            if stage.describe and result is not None and result.has_text:
                logger.info("Stage %s (%s) returned a description", stage.label, stage.model)
                return VisualizeResponse(
                    result_image=None,
                    text_description=result.text.strip(),
                    message=DESCRIPTION_SUCCESS_MESSAGE,
                    model=stage.model,
                )
            logger.warning("Stage %s (%s) returned no usable output", stage.label, stage.model)

        logger.error("All %d visualization stages failed", len(stages))
        raise VisualizeError(EXHAUSTED_MESSAGE, 500, "generation_failed")
