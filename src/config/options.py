"""Lighting style catalog and prompt table loaded from templates.yml."""

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from src.utility.utils import Helper


def _load_styles() -> Mapping[str, Mapping[str, str]]:
    raw = Helper().load_template("LIGHTING_STYLES")
    styles: Dict[str, Mapping[str, str]] = {}
    for key, entry in raw.items():
        prompt = (entry or {}).get("prompt", "")
        if not prompt.strip():
            raise ValueError(f"Lighting style '{key}' has no prompt")
        styles[key] = MappingProxyType(
            {
                "name": entry.get("name", key),
                "description": entry.get("description", ""),
                "prompt": prompt.strip(),
            }
        )
    return MappingProxyType(styles)


_STYLES = _load_styles()

# style key -> prompt text, frozen at import
STYLE_PROMPTS: Mapping[str, str] = MappingProxyType(
    {key: entry["prompt"] for key, entry in _STYLES.items()}
)
DESCRIPTION_TEMPLATE: str = Helper().load_template("DESCRIPTION_TEMPLATE").strip()


class Options:
    """Read-only view over the lighting styles a visitor can pick from.

    Exposes prompt lookup for the visualizer and the display catalog
    for clients that render the style selector.
    """

    def __init__(self, styles: Optional[Mapping[str, Mapping[str, str]]] = None):
        self.styles = styles if styles is not None else _STYLES

    def is_valid(self, style: Optional[str]) -> bool:
        return bool(style) and style in self.styles

    def get_prompt(self, style: Optional[str]) -> Optional[str]:
        """Return the prompt for a style key, or None when unknown."""
        if not self.is_valid(style):
            return None
        return self.styles[style]["prompt"]

    def build_description_prompt(self, style_prompt: str) -> str:
        """Wrap a style prompt into the describe-only instruction."""
        return DESCRIPTION_TEMPLATE.format(style_prompt=style_prompt)

    def get_options(self) -> List[Dict[str, str]]:
        """Return the style catalog in display order."""
        return [
            {
                "id": key,
                "name": entry["name"],
                "description": entry["description"],
            }
            for key, entry in self.styles.items()
        ]
