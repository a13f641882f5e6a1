"""Shared helpers for template loading and uploaded-image handling."""

import io
import base64
from typing import Any, Dict, Optional, Tuple

import yaml
from PIL import Image, UnidentifiedImageError

from src.utility.path_finder import Finder

# Aspect ratios accepted by Gemini image models, as (label, width / height).
GEMINI_ASPECT_RATIOS = (
    ("1:1", 1.0),
    ("2:3", 2 / 3),
    ("3:2", 3 / 2),
    ("3:4", 3 / 4),
    ("4:3", 4 / 3),
    ("4:5", 4 / 5),
    ("5:4", 5 / 4),
    ("9:16", 9 / 16),
    ("16:9", 16 / 9),
    ("21:9", 21 / 9),
)


class Helper:
    """Reusable utilities for prompt templates and base64 image payloads."""

    def __init__(self):
        self.path = Finder()

    def load_templates(self) -> Dict[str, Any]:
        """Load the YAML template file that holds the style prompts."""
        full_path = self.path.get_file("templates")
        with open(full_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Template file {full_path} is empty or malformed")
        return data

    def load_template(self, template: str) -> Any:
        """Return a single top-level template entry by key."""
        data = self.load_templates()
        if template not in data:
            raise KeyError(f"Template '{template}' missing in {self.path.get_file('templates')}")
        return data[template]

    @staticmethod
    def decode_b64(data_b64: str) -> bytes:
        """
        Decode a base64 payload, tolerating a leading data-URI prefix
        ("data:image/png;base64,...") and missing padding.
        """
        if data_b64.startswith("data:") and "," in data_b64:
            data_b64 = data_b64.split(",", 1)[1]
        data_b64 = "".join(data_b64.split())
        data_b64 += "=" * (-len(data_b64) % 4)
        return base64.b64decode(data_b64, validate=True)

    @staticmethod
    def encode_b64(raw: bytes) -> str:
        return base64.b64encode(raw).decode("utf-8")

    @staticmethod
    def read_image_size(raw: bytes) -> Optional[Tuple[int, int]]:
        """Return (width, height) if Pillow can open the bytes, else None."""
        try:
            with Image.open(io.BytesIO(raw)) as img:
                img.verify()
            # verify() leaves the image unusable, reopen for the size
            with Image.open(io.BytesIO(raw)) as img:
                return img.size
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
            return None

    @staticmethod
    def closest_aspect_ratio(width: int, height: int) -> str:
        """Map image dimensions to the nearest aspect ratio Gemini accepts."""
        if width <= 0 or height <= 0:
            return "1:1"
        ratio = width / height
        label, _ = min(GEMINI_ASPECT_RATIOS, key=lambda item: abs(item[1] - ratio))
        return label

