"""
FastAPI server for Orchestration Core
"""
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import router
from .. import __version__
from ..core.bootstrap import get_container
from ..core.config import Config
from ..core.workspace import Workspace
from ..utils.logger import get_logger

logger = get_logger(__name__)


def create_app(workspace: Optional[Workspace] = None) -> FastAPI:
    """
    Build the API application

    Args:
        workspace: Workspace to serve (built from the service container on
            startup when omitted)
    """
    app = FastAPI(title="Orchestration Core API", version=__version__)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup():
        """Initialize services on startup"""
        if workspace is not None:
            app.state.workspace = workspace
            return
        container = get_container(mode=Config.MODE)
        app.state.workspace = Workspace(container=container)
        logger.info(f"Workspace ready in {Config.MODE} mode")

    @app.on_event("shutdown")
    async def shutdown():
        """Stop scheduler timers and wait for their runs"""
        if hasattr(app.state, 'workspace'):
            await app.state.workspace.shutdown()

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": "Orchestration Core",
            "version": __version__,
            "mode": Config.MODE,
            "status": "running",
        }

    @app.get("/health")
    async def health():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "mode": Config.MODE,
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=Config.API_HOST, port=Config.API_PORT)
