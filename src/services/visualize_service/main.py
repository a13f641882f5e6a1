"""Factories for visualizer dependencies and the style catalog."""

from src.config.options import Options
from src.services.visualize_service.visualizer import Visualizer


class VisualizeService:
    """Expose dependency providers for the visualize routes.

    Keeps FastAPI dependency wiring concise and lets tests override
    a single provider function.
    """

    @staticmethod
    def get_visualizer() -> Visualizer:
        """Provide a Visualizer that reads settings at request time."""
        return Visualizer()

    @staticmethod
    def get_style_options() -> Options:
        """Return the lighting style catalog."""
        return Options()
