from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.health import liveness_check

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/health-check/", response_model=None)
async def health_check() -> bool | JSONResponse:
    """
    Liveness probe: database reachable and host environment started.

    Returns 200 with true when healthy; 503 with the failing checks otherwise.
    """
    ok, failures = liveness_check()
    if not ok:
        return JSONResponse(
            status_code=503,
            content={"success": False, "message": "Service Unavailable", "data": failures},
        )
    return True
