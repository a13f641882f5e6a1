"""API routes for the lighting visualizer."""

from fastapi import APIRouter, Depends

from src.config.options import Options
from src.handlers.error_handler import MapExceptions, VisualizeError
from src.models.visualize import (
    ErrorResponse,
    StylesResponse,
    VisualizeRequest,
    VisualizeResponse,
)
from src.services.visualize_service.main import VisualizeService as vs
from src.services.visualize_service.visualizer import Visualizer
from src.utility.logger import AppLogger

router = APIRouter(prefix="/api/visualize", tags=["Visualizer"])
logger = AppLogger.get_logger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post(
    "",
    response_model=VisualizeResponse,
    response_model_by_alias=True,
    responses=ERROR_RESPONSES,
)
async def visualize(
    payload: VisualizeRequest,
    service: Visualizer = Depends(vs.get_visualizer),
) -> VisualizeResponse:
    """Render (or describe) the uploaded home with the selected lighting style."""
    try:
        return await service.visualize(payload)
    except VisualizeError:
        raise
    except Exception as e:
        raise MapExceptions().classify(e)


@router.get("/styles", response_model=StylesResponse)
async def styles(
    service: Options = Depends(vs.get_style_options),
) -> StylesResponse:
    """Return the lighting styles a visitor can choose from."""
    return StylesResponse(styles=service.get_options())
