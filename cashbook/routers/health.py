from fastapi import APIRouter, Depends

from cashbook.core.config import Settings, get_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness check")
async def health(settings: Settings = Depends(get_settings)):
    return {"status": "ok", "version": settings.version}
