from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.deps import get_token_store
from app.redis_client import TokenStore, redis_ping

router = APIRouter(tags=["health"])

@router.get("/health")
def health() -> dict:
    return {"status": "ok"}

# 200 only when the token store answers
@router.get("/ready")
def ready(store: TokenStore = Depends(get_token_store)):
    ok = redis_ping(store)
    body = {"status": "ok" if ok else "unready", "checks": {"token_store": ok}}
    return JSONResponse(status_code=200 if ok else 503, content=body)
