from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.api.deps import build_store, build_snapshot_cache

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = build_store(settings)
    app.state.settings = settings
    app.state.snapshot_cache = build_snapshot_cache(store, settings)
    yield
    await app.state.snapshot_cache.aclose()
    if hasattr(store, "aclose"):
        await store.aclose()


app = FastAPI(
    title="Promotion Engine API",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Import routers after app creation to avoid circular imports
from app.api import evaluation

app.include_router(evaluation.router)


@app.get("/")
def root():
    return {"status": "ok", "service": "promotion-engine"}


@app.get("/api/health")
def health_check():
    return {
        "status": "healthy",
        "env": settings.ENV
    }
