from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.documents import router as documents_router
from app.cache import build_cache_from_env
from app.logging_setup import configure_logging, logging_middleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.cache = await build_cache_from_env()
    try:
        yield
    finally:
        await app.state.cache.close()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="GeoJSON CRS pipeline", lifespan=lifespan)
    app.middleware("http")(logging_middleware)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(documents_router)
    return app

app = create_app()
