"""FastAPI Application.

REST API layer for the IFC model tree.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ifc_model_tree.application.services.tree_service import ModelTreeService
from ifc_model_tree.presentation.api import routes
from ifc_model_tree.shared.config import settings


def create_app(service: ModelTreeService | None = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        service: Model tree service; a fresh one is created if omitted

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="IFC Model Tree API",
        description="REST API for browsing IFC model structure",
        version=settings.app_version,
    )
    app.state.tree_service = service or ModelTreeService()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",  # Viewer dev server
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(routes.tree.router, prefix="/api/v1", tags=["v1-tree"])

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "service": "ifc-model-tree-api"}

    return app


# Create app instance
app = create_app()
