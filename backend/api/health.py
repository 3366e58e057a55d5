"""GET /api/health — liveness and supported databases."""
import logging
from fastapi import APIRouter, Request

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(request: Request):
    return {
        "status": "ok",
        "databases": request.app.state.providers.supported,
    }
