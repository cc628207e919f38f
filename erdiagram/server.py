"""
Entity Relationship Diagram API - FastAPI Application

It provides:
- Diagram composition for each layout strategy (elastic, navigable, spectral)
- Focus/context navigation for a chosen entity
- Validation and summaries of input data
- CORS configuration for local frontend development

Every request builds its own host and diagram; nothing is shared between
requests.
"""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .analysis import summarize_graph
from .composition import LayoutStrategy, compose_diagram
from .config import Settings, get_settings
from .graph import EntityReferenceError, Graph
from .models import ElasticLayoutOptions, EntityRelationshipData
from .rendering import DiagramHost
from .validation import validate_data, validation_summary

logger = logging.getLogger(__name__)


class DiagramRequest(BaseModel):
    data: EntityRelationshipData
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    seed: Optional[int] = None
    options: Optional[ElasticLayoutOptions] = None


class NavigateRequest(BaseModel):
    data: EntityRelationshipData
    entity: Optional[str] = None  # First entity if omitted
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the API application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Entity Relationship Diagram API",
        description="Layout and navigation for entity relationship diagrams",
        version="1.0.0",
    )

    # CORS for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def make_host(width: Optional[float], height: Optional[float], seed: Optional[int] = None) -> DiagramHost:
        return DiagramHost(
            width=width or settings.width,
            height=height or settings.height,
            seed=settings.seed if seed is None else seed,
        )

    # --- Health Check ---

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    # --- Composition ---

    @app.post("/api/diagram/{strategy}")
    async def create_diagram(strategy: LayoutStrategy, request: DiagramRequest):
        """Compose a diagram with the given layout strategy."""
        host = make_host(request.width, request.height, request.seed)
        try:
            diagram = compose_diagram(host, request.data, strategy, request.options)
        except EntityReferenceError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return diagram.to_dict()

    @app.post("/api/navigate")
    async def navigate(request: NavigateRequest):
        """Show one entity with its predecessors and successors."""
        host = make_host(request.width, request.height)
        try:
            diagram = compose_diagram(host, request.data, LayoutStrategy.NAVIGABLE)
        except EntityReferenceError as e:
            raise HTTPException(status_code=400, detail=str(e))

        if request.entity is not None:
            try:
                diagram.select(request.entity)
            except KeyError:
                raise HTTPException(status_code=404, detail=f"Entity not found: {request.entity}")
        return diagram.to_dict()

    # --- Analysis & Validation ---

    @app.post("/api/validate")
    async def validate(data: EntityRelationshipData):
        """
        Validate input data for structural issues.

        Returns a list of issues (errors, warnings, info) and a summary.
        """
        issues = validate_data(data)
        return {
            "success": True,
            "issues": [issue.to_dict() for issue in issues],
            "summary": validation_summary(issues),
        }

    @app.post("/api/summarize")
    async def summarize(data: EntityRelationshipData):
        """Summarize the structure of the entity graph."""
        try:
            graph = Graph.from_data(data)
        except EntityReferenceError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"success": True, "summary": summarize_graph(graph).to_dict()}

    return app


def run(settings: Optional[Settings] = None):
    """Serve the API with uvicorn."""
    import uvicorn

    settings = settings or get_settings()
    logger.info("Serving on %s:%d", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


# --- Run with uvicorn ---

if __name__ == "__main__":
    run()
