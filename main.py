import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from app.config import CORS_ORIGINS, HOST, PORT
from app.database import create_db_engine, create_session_factory, init_db
from app.errors import register_exception_handlers
from app.routers import cars, favorites
from app.services.identity import IdentityProvider, QueryParamIdentityProvider
from app.utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(app.state.engine)
    yield
    app.state.engine.dispose()
    logger.info("Database connections closed")


def create_app(engine: Optional[Engine] = None, identity_provider: Optional[IdentityProvider] = None) -> FastAPI:
    """
    Build the API application.

    The app owns its engine (and connection pool) and the identity provider
    used for favorites; both can be injected, which is how tests run against
    an in-memory database.
    """
    app = FastAPI(
        title="Electric Cars API",
        description="Browse, search, filter, export and favorite electric vehicle specifications.",
        version="1.0.0",
        docs_url="/api-docs",
        lifespan=lifespan,
    )

    app.state.engine = engine if engine is not None else create_db_engine()
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.identity_provider = identity_provider or QueryParamIdentityProvider()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
        return response

    app.include_router(cars.router, prefix="/api", tags=["Cars"])
    app.include_router(favorites.router, prefix="/api", tags=["Favorites"])

    @app.get("/api/health", tags=["Health"])
    async def health_check():
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/")
    async def read_root():
        return {"message": "Welcome to Electric Cars API"}

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host=HOST, port=PORT, reload=True)
