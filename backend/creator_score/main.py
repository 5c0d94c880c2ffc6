from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from creator_score.config import settings
from creator_score.routers import leaderboard as leaderboard_router
from creator_score.routers import preferences as preferences_router
from creator_score.routers import snapshots as snapshots_router

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = [
        name
        for name in ("talent_api_key", "supabase_url", "supabase_service_role_key")
        if not getattr(settings, name)
    ]
    if missing:
        logger.warning("Missing configuration: %s", ", ".join(missing))
    if not settings.snapshot_admin_api_key:
        logger.warning("snapshot_admin_api_key not set; admin routes will reject all requests")
    yield


app = FastAPI(
    title="Creator Score API",
    description="Creator Score leaderboard and sponsor pool rewards",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(leaderboard_router.router)
app.include_router(preferences_router.router)
app.include_router(snapshots_router.router)


@app.get("/health")
def health():
    return {"status": "ok"}
