"""Pydantic models for the visualize endpoint payloads and provider results."""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MIME_TYPE = "image/jpeg"


class VisualizeRequest(BaseModel):
    """Uploaded photo plus the selected lighting style.

    Fields are optional here so the visualizer can apply its own ordered
    checks and answer with the documented status codes.
    """

    image: Optional[str] = None
    style: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    @property
    def resolved_mime_type(self) -> str:
        return (self.mime_type or DEFAULT_MIME_TYPE).lower()


class VisualizeResponse(BaseModel):
    """Successful visualization, either a rendered image or a description."""

    success: bool = True
    result_image: Optional[str] = Field(default=None, alias="resultImage")
    text_description: Optional[str] = Field(default=None, alias="textDescription")
    message: str
    model: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """User-facing failure body."""

    success: bool = False
    message: str


class ProviderResult(BaseModel):
    """What a single provider call produced: an image, some text, both or neither."""

    image: Optional[str] = None
    text: Optional[str] = None
    mime_type: Optional[str] = None

    @property
    def has_image(self) -> bool:
        return bool(self.image)

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())


class StyleOption(BaseModel):
    """One entry of the lighting style picker."""

    id: str
    name: str
    description: str


class StylesResponse(BaseModel):
    styles: List[StyleOption] = Field(default_factory=list)
