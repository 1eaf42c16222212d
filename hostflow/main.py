from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hostflow.cloud_sync import VaultReconciler
from hostflow.core.config import CORS_ORIGINS, MASTER_EMAIL
from hostflow.core.logging import get_logger
from hostflow.database import BackendHandle, get_backend
from hostflow.routers import admin, auth

logger = get_logger("MAIN APP LOGIC")


def create_app(backend: Optional[BackendHandle] = None, master_email: Optional[str] = None) -> FastAPI:
    """
    Build the HostFlow sync API.

    When no backend is injected the process-wide handle is resolved at
    startup from the environment.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "reconciler", None) is None:
            handle = await get_backend()
            app.state.reconciler = VaultReconciler(handle)
        logger.info(f"Reconciler ready (remote configured: {app.state.reconciler.backend.configured})")
        yield

    app = FastAPI(title="HostFlow Cloud Sync", lifespan=lifespan)
    app.state.master_email = master_email if master_email is not None else MASTER_EMAIL
    if backend is not None:
        app.state.reconciler = VaultReconciler(backend)

    @app.get("/")
    def read_root():
        return {"Hello from HostFlow Cloud Sync!"}

    app.include_router(auth.router)
    app.include_router(admin.router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
