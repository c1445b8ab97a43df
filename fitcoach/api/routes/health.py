"""Health check endpoint."""
import time
from datetime import datetime

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from fitcoach.db.database import get_database

router = APIRouter(tags=["health"])

STARTED_AT = time.time()


@router.get("/health")
async def health(request: Request):
    """Liveness plus a database round trip; 503 when the database is unreachable."""
    database_ok = await get_database(request).ping()
    providers = getattr(request.app.state, "providers", None)
    body = {
        "status": "healthy" if database_ok else "unhealthy",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "uptime_seconds": round(time.time() - STARTED_AT, 2),
        "database": "ok" if database_ok else "unreachable",
        "providers": [t.value for t in providers.types] if providers else [],
    }
    return JSONResponse(status_code=200 if database_ok else 503, content=body)
