"""Provider bindings that turn (prompt, photo) into an image and/or text."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests
from google import genai
from google.genai import types
from openai import AsyncOpenAI

from src.models.visualize import ProviderResult
from src.utility.utils import Helper
from src.utility.logger import AppLogger

logger = AppLogger.get_logger(__name__)

DUAL_MODALITIES = ["TEXT", "IMAGE"]
TEXT_MODALITY = ["TEXT"]

MOCK_DESCRIPTION = (
    "Warm 2700K uplights at the base of the facade wash the walls in a soft "
    "amber glow, path lights trace the walkway to the front door, and accent "
    "lights pick out the trees against a deep blue evening sky."
)


class ProviderResponseError(RuntimeError):
    """Provider answered but the answer was unusable (blocked, empty, malformed)."""


class VisualizationProvider(ABC):
    """One way of asking a generative model to light up a photo.

    The fallback chain only depends on this interface, so bindings can be
    swapped (SDK, raw HTTP, another vendor) without touching control flow.
    """

    name: str = "provider"

    @abstractmethod
    async def generate(
        self, prompt: str, image_b64: str, mime_type: str
    ) -> ProviderResult:
        """Return whatever image and/or text the model produced."""


# --- Gemini response parsing -------------------------------------------------


def read_inline_image(part: Any) -> Optional[str]:
    """
    Return the base64 payload of an inline image part, or None.
    The SDK surfaces raw bytes, the REST API a base64 string.
    """
    inline = getattr(part, "inline_data", None)
    if inline is None and isinstance(part, dict):
        inline = part.get("inlineData") or part.get("inline_data")
    if not inline:
        return None

    data = inline.get("data") if isinstance(inline, dict) else getattr(inline, "data", None)
    if not data:
        return None
    if isinstance(data, (bytes, bytearray)):
        return Helper.encode_b64(bytes(data))
    return str(data)


def read_inline_mime(part: Any) -> Optional[str]:
    inline = getattr(part, "inline_data", None)
    if inline is None and isinstance(part, dict):
        inline = part.get("inlineData") or part.get("inline_data")
    if not inline:
        return None
    if isinstance(inline, dict):
        return inline.get("mimeType") or inline.get("mime_type")
    return getattr(inline, "mime_type", None)


def read_text(part: Any) -> Optional[str]:
    text = part.get("text") if isinstance(part, dict) else getattr(part, "text", None)
    # Gemini 3 models emit "thought" parts alongside the answer
    thought = part.get("thought") if isinstance(part, dict) else getattr(part, "thought", None)
    if thought:
        return None
    return text or None


def parse_parts(parts: List[Any]) -> ProviderResult:
    """Pick the first inline image and join all text parts."""
    image = None
    mime_type = None
    texts: List[str] = []
    for part in parts or []:
        if image is None:
            image = read_inline_image(part)
            if image is not None:
                mime_type = read_inline_mime(part)
                continue
        text = read_text(part)
        if text:
            texts.append(text.strip())
    return ProviderResult(
        image=image,
        text="\n\n".join(t for t in texts if t) or None,
        mime_type=mime_type,
    )


def parse_sdk_response(resp: Any) -> ProviderResult:
    """Extract image/text from a google-genai GenerateContentResponse."""
    feedback = getattr(resp, "prompt_feedback", None)
    block_reason = getattr(feedback, "block_reason", None) if feedback else None
    if block_reason:
        raise ProviderResponseError(f"Prompt blocked by safety filter: {block_reason}")

    candidates = getattr(resp, "candidates", None) or []
    if not candidates:
        raise ProviderResponseError("No candidates in model response")

    candidate = candidates[0]
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) if content is not None else None
    if not parts:
        finish_reason = getattr(candidate, "finish_reason", None)
        raise ProviderResponseError(
            f"No content in model response (finish_reason={finish_reason})"
        )
    return parse_parts(parts)


def parse_rest_response(payload: Dict[str, Any]) -> ProviderResult:
    """Extract image/text from a generateContent JSON body."""
    block_reason = (payload.get("promptFeedback") or {}).get("blockReason")
    if block_reason:
        raise ProviderResponseError(f"Prompt blocked by safety filter: {block_reason}")

    candidates = payload.get("candidates") or []
    if not candidates:
        raise ProviderResponseError("No candidates in model response")

    parts = (candidates[0].get("content") or {}).get("parts")
    if not parts:
        raise ProviderResponseError(
            f"No content in model response (finishReason={candidates[0].get('finishReason')})"
        )
    return parse_parts(parts)


# --- Bindings -----------------------------------------------------------------


class GeminiImageProvider(VisualizationProvider):
    """google-genai SDK call requesting both an edited image and text."""

    def __init__(
        self,
        client: genai.Client,
        model: str,
        aspect_ratio: Optional[str] = None,
        image_size: Optional[str] = None,
    ):
        self.client = client
        self.name = model
        self.aspect_ratio = aspect_ratio
        self.image_size = image_size

    def build_config(self) -> types.GenerateContentConfig:
        image_config_kwargs = {}
        if self.aspect_ratio:
            image_config_kwargs["aspect_ratio"] = self.aspect_ratio
        if self.image_size:
            image_config_kwargs["image_size"] = self.image_size
        return types.GenerateContentConfig(
            response_modalities=DUAL_MODALITIES,
            image_config=(
                types.ImageConfig(**image_config_kwargs) if image_config_kwargs else None
            ),
        )

    async def generate(
        self, prompt: str, image_b64: str, mime_type: str
    ) -> ProviderResult:
        resp = await self.client.aio.models.generate_content(
            model=self.name,
            contents=[
                prompt,
                types.Part.from_bytes(
                    data=Helper.decode_b64(image_b64), mime_type=mime_type
                ),
            ],
            config=self.build_config(),
        )
        return parse_sdk_response(resp)


class GeminiTextProvider(VisualizationProvider):
    """google-genai SDK call that only describes the lit-up scene."""

    def __init__(self, client: genai.Client, model: str):
        self.client = client
        self.name = model

    async def generate(
        self, prompt: str, image_b64: str, mime_type: str
    ) -> ProviderResult:
        resp = await self.client.aio.models.generate_content(
            model=self.name,
            contents=[
                prompt,
                types.Part.from_bytes(
                    data=Helper.decode_b64(image_b64), mime_type=mime_type
                ),
            ],
            config=types.GenerateContentConfig(response_modalities=TEXT_MODALITY),
        )
        result = parse_sdk_response(resp)
        return ProviderResult(text=result.text)


class GeminiRestProvider(VisualizationProvider):
    """Direct HTTP call to generateContent, no SDK involved."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        modalities: Optional[List[str]] = None,
        aspect_ratio: Optional[str] = None,
        timeout: float = 90,
    ):
        self.api_key = api_key
        self.name = model
        self.base_url = base_url.rstrip("/")
        self.modalities = modalities or DUAL_MODALITIES
        self.aspect_ratio = aspect_ratio
        self.timeout = timeout

    def build_body(self, prompt: str, image_b64: str, mime_type: str) -> Dict[str, Any]:
        generation_config: Dict[str, Any] = {"responseModalities": self.modalities}
        if self.aspect_ratio and "IMAGE" in self.modalities:
            generation_config["imageConfig"] = {"aspectRatio": self.aspect_ratio}
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": prompt},
                        {"inlineData": {"mimeType": mime_type, "data": image_b64}},
                    ],
                }
            ],
            "generationConfig": generation_config,
        }

    def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/models/{self.name}:generateContent"
        resp = requests.post(
            url,
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self.api_key,
            },
            json=body,
            timeout=self.timeout,
        )
        if not resp.ok:
            # status and body carry the "quota"/"not found" hints used downstream
            raise ProviderResponseError(
                f"API request failed: {resp.status_code} {resp.text[:500]}"
            )
        return resp.json()

    async def generate(
        self, prompt: str, image_b64: str, mime_type: str
    ) -> ProviderResult:
        body = self.build_body(prompt, image_b64, mime_type)
        payload = await asyncio.to_thread(self._post, body)
        result = parse_rest_response(payload)
        if "IMAGE" not in self.modalities:
            return ProviderResult(text=result.text)
        return result


class OpenAITextProvider(VisualizationProvider):
    """OpenAI vision chat completion used as an alternative description stage.

    The client is created on first use so a missing key only fails this
    stage, never the image stages before it.
    """

    def __init__(self, api_key: Optional[str], model: str):
        self.api_key = api_key
        self.name = model
        self.client: Optional[AsyncOpenAI] = None

    def get_client(self) -> AsyncOpenAI:
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY is not set.")
        if self.client is None:
            self.client = AsyncOpenAI(api_key=self.api_key)
        return self.client

    async def generate(
        self, prompt: str, image_b64: str, mime_type: str
    ) -> ProviderResult:
        resp = await self.get_client().chat.completions.create(
            model=self.name,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime_type};base64,{image_b64}"},
                        },
                    ],
                }
            ],
        )
        if not resp or not getattr(resp, "choices", None):
            raise ProviderResponseError("No choices in OpenAI response")
        return ProviderResult(text=resp.choices[0].message.content)


class MockProvider(VisualizationProvider):
    """No network. Echoes the photo back, or a canned description."""

    def __init__(self, name: str, returns_image: bool = True):
        self.name = name
        self.returns_image = returns_image

    async def generate(
        self, prompt: str, image_b64: str, mime_type: str
    ) -> ProviderResult:
        logger.info("Mock provider %s called (no external API call)", self.name)
        if self.returns_image:
            return ProviderResult(image=image_b64, mime_type=mime_type)
        return ProviderResult(text=MOCK_DESCRIPTION)
