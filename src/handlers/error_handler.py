"""Error handling helpers for mapping provider failures to API responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from src.utility.logger import AppLogger

logger = AppLogger.get_logger(__name__)

QUOTA_MESSAGE = (
    "API quota exceeded. Please try again later or contact us for a free "
    "in-person demonstration."
)
CONFIGURATION_MESSAGE = (
    "The visualizer is not configured correctly. Please contact us for assistance."
)
MODEL_UNAVAILABLE_MESSAGE = (
    "The AI model is temporarily unavailable. Please try again later."
)
CONTENT_BLOCKED_MESSAGE = (
    "This image was blocked by our content safety filter. Please try a "
    "different photo of your home's exterior."
)
GENERIC_MESSAGE = (
    "An error occurred while processing your image. Please try again or "
    "contact us for a free demonstration."
)


@dataclass
class VisualizeError(Exception):
    """
    Domain error for the visualize flow.
    This is what FastAPI will ultimately handle and send as JSON.
    """

    message: str
    status_code: int = 500
    error_type: str = "unknown_error"
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.error_type} ({self.status_code}): {self.message}"

    def to_content(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message}


@dataclass(frozen=True)
class ErrorRule:
    """One classification rule: any substring hit selects this category."""

    substrings: Tuple[str, ...]
    status_code: int
    error_type: str
    message: str

    def matches(self, text: str) -> bool:
        return any(s in text for s in self.substrings)


# Evaluated top to bottom, first match wins.
ERROR_RULES: Tuple[ErrorRule, ...] = (
    ErrorRule(("quota", "rate limit"), 429, "quota_exceeded", QUOTA_MESSAGE),
    ErrorRule(
        ("api key", "api_key", "invalid key", "unauthorized"),
        500,
        "configuration_error",
        CONFIGURATION_MESSAGE,
    ),
    ErrorRule(("not found", "404"), 500, "model_unavailable", MODEL_UNAVAILABLE_MESSAGE),
    ErrorRule(("safety", "blocked"), 400, "content_blocked", CONTENT_BLOCKED_MESSAGE),
)


class MapExceptions:
    """Translate raw provider exceptions into user-facing VisualizeErrors.

    Matching is best-effort on the lower-cased exception text; anything
    unmatched maps to the generic 500 message. Raw provider text is
    logged only, never returned to the client.
    """

    def __init__(self, rules: Tuple[ErrorRule, ...] = ERROR_RULES):
        self.rules = rules

    def classify(self, exc: BaseException) -> VisualizeError:
        """Map any exception to a VisualizeError using the ordered rules."""
        if isinstance(exc, VisualizeError):
            return exc

        text = str(exc).lower()
        logger.error(
            "Visualizer error (%s): %s", exc.__class__.__name__, exc, exc_info=exc
        )
        for rule in self.rules:
            if rule.matches(text):
                return VisualizeError(
                    message=rule.message,
                    status_code=rule.status_code,
                    error_type=rule.error_type,
                )

        return VisualizeError(
            message=GENERIC_MESSAGE,
            status_code=500,
            error_type="unknown_error",
            details={"exception_type": exc.__class__.__name__},
        )

    def describe_request_error(self, exc: RequestValidationError) -> str:
        """
        Summarize body validation errors from each error's type and msg only.
        Pydantic echoes the offending input, which is client data and may be
        the whole image payload.
        """
        parts = []
        for error in exc.errors():
            loc = ".".join(str(p) for p in error.get("loc", ()))
            parts.append(f"{loc}: {error.get('type', '')} ({error.get('msg', '')})")
        return "; ".join(parts) or "invalid request body"

    def classify_request_error(self, exc: RequestValidationError) -> VisualizeError:
        """Classify a body validation failure without looking at echoed input."""
        summary = self.describe_request_error(exc)
        logger.warning("Rejected request body: %s", summary)
        return self.classify(ValueError(summary))

    @staticmethod
    def register_exception_handlers(app: FastAPI) -> None:
        """
        Call this once in the FastAPI app to register handlers:

            app = FastAPI()
            MapExceptions.register_exception_handlers(app)
        """

        @app.exception_handler(VisualizeError)
        async def visualize_error_handler(
            request: Request, exc: VisualizeError
        ) -> JSONResponse:
            logger.warning(
                "VisualizeError on %s: %s details=%s", request.url.path, exc, exc.details
            )
            return JSONResponse(status_code=exc.status_code, content=exc.to_content())

        @app.exception_handler(RequestValidationError)
        async def request_validation_handler(
            request: Request, exc: RequestValidationError
        ) -> JSONResponse:
            mapped = MapExceptions().classify_request_error(exc)
            return JSONResponse(
                status_code=mapped.status_code, content=mapped.to_content()
            )
