"""
FastAPI main application for TopicLink.

Exposes endpoints for:
- Knowledge graph CRUD (create, list, get, rename, replace topics, delete).
- Related topics across other graphs for a clicked topic.
- Health and request metrics.
"""

import logging
from contextlib import asynccontextmanager
from time import perf_counter
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from src.common.config_utils import (
    get_api_port,
    get_cors_origins,
    get_rate_limit,
    get_relatedness_config,
    get_section,
)
from src.common.logging_utils import setup_logging
from src.database.connection import DatabaseManager
from src.graph.graph_service import GraphService
from src.monitoring.api_metrics import get_api_metrics_summary, record_api_request

setup_logging()
logger = logging.getLogger(__name__)

READ_LIMIT = get_rate_limit("read")
WRITE_LIMIT = get_rate_limit("write")
RELATED_LIMIT = get_rate_limit("related")

_db_manager: Optional[DatabaseManager] = None
_graph_service: Optional[GraphService] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    global _db_manager, _graph_service

    try:
        _db_manager = DatabaseManager.from_config()
        await _db_manager.initialize()
        relatedness_cfg = get_relatedness_config()
        _graph_service = GraphService(
            db_manager=_db_manager,
            max_related=relatedness_cfg["max_results"],
            min_similarity=relatedness_cfg["min_similarity"],
        )
        logger.info("API started with database-backed graph service")
    except Exception:  # noqa: BLE001
        logger.exception("Database unavailable at startup; graph endpoints will return 503")
        _graph_service = None

    yield

    try:
        if _db_manager:
            await _db_manager.close()
    except Exception:  # noqa: BLE001
        logger.warning("Error while closing database connections", exc_info=True)
    finally:
        _db_manager = None
        _graph_service = None


app = FastAPI(
    title=get_section("api").get("title", "TopicLink API"),
    description="API for building topic graphs and finding related topics across graphs",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class CreateGraphRequest(BaseModel):
    """
    Request body for graph creation.

    Fields are left untyped so GraphService validates them and a bad body
    maps to 400.
    """

    name: Any = None
    topics: Any = None


class RenameGraphRequest(BaseModel):
    name: Any = None


class ReplaceTopicsRequest(BaseModel):
    topics: Any = None


class CreateGraphResponse(BaseModel):
    graphId: int


class RelatedTopicResponse(BaseModel):
    """One related topic row."""

    id: int
    title: str
    occurrences: int
    similarity: float
    score: float
    reason: str


class RelatedTopicsResponse(BaseModel):
    """Response model for the related topics lookup."""

    topic: Dict[str, Any]
    related: List[RelatedTopicResponse]


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests and responses with latency, and track metrics."""
    start = perf_counter()
    try:
        response = await call_next(request)
    except Exception:  # noqa: BLE001
        duration_ms = (perf_counter() - start) * 1000
        record_api_request(_route_template(request), request.method, 500, duration_ms)
        logger.exception(
            "Unhandled error during request %s %s after %.2fms",
            request.method,
            request.url.path,
            duration_ms,
        )
        raise

    duration_ms = (perf_counter() - start) * 1000
    record_api_request(
        _route_template(request),
        request.method,
        response.status_code,
        duration_ms,
    )
    logger.info(
        "HTTP %s %s -> %s in %.2fms",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def _ensure_service_available() -> GraphService:
    if _graph_service is None:
        raise HTTPException(
            status_code=503,
            detail="Graph service is not available. Check the database connection.",
        )
    return _graph_service


@app.get("/")
async def root():
    """API info."""
    return {"message": "TopicLink API", "version": "0.1.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    database_ok = False
    if _db_manager is not None:
        database_ok = await _db_manager.health_check()
    status = "healthy" if _graph_service is not None and database_ok else "degraded"
    return {"status": status, "database": database_ok}


@app.post("/graphs", status_code=201, response_model=CreateGraphResponse)
@limiter.limit(WRITE_LIMIT)
async def create_graph(request: Request, body: CreateGraphRequest):
    """Create a graph from a name and a list of topic strings."""
    service = _ensure_service_available()
    try:
        graph_id = await service.create_graph(body.name, body.topics)
        return {"graphId": graph_id}
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception:  # noqa: BLE001
        logger.exception("Error creating graph '%s'", body.name)
        raise HTTPException(status_code=500, detail="Failed to create graph")


@app.get("/graphs")
@limiter.limit(READ_LIMIT)
async def list_graphs(request: Request):
    """Return all graphs, newest first."""
    service = _ensure_service_available()
    try:
        return {"graphs": await service.list_graphs()}
    except Exception:  # noqa: BLE001
        logger.exception("Error listing graphs")
        raise HTTPException(status_code=500, detail="Failed to list graphs")


@app.get("/graphs/{graph_id}")
@limiter.limit(READ_LIMIT)
async def get_graph(request: Request, graph_id: int):
    """Return a graph with its topic nodes."""
    service = _ensure_service_available()
    try:
        graph_data = await service.get_graph(graph_id)
    except Exception:  # noqa: BLE001
        logger.exception("Error fetching graph %d", graph_id)
        raise HTTPException(status_code=500, detail="Internal server error")

    if graph_data is None:
        raise HTTPException(status_code=404, detail="Graph not found")
    return {"graphData": graph_data}


@app.put("/graphs/{graph_id}")
@limiter.limit(WRITE_LIMIT)
async def rename_graph(request: Request, graph_id: int, body: RenameGraphRequest):
    """Rename a graph."""
    service = _ensure_service_available()
    try:
        graph = await service.rename_graph(graph_id, body.name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception:  # noqa: BLE001
        logger.exception("Error renaming graph %d", graph_id)
        raise HTTPException(status_code=500, detail="Failed to rename graph")

    if graph is None:
        raise HTTPException(status_code=404, detail="Graph not found")
    return {"graph": graph}


@app.put("/graphs/{graph_id}/topics")
@limiter.limit(WRITE_LIMIT)
async def replace_topics(request: Request, graph_id: int, body: ReplaceTopicsRequest):
    """Replace the topics of a graph."""
    service = _ensure_service_available()
    try:
        topics = await service.replace_topics(graph_id, body.topics)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception:  # noqa: BLE001
        logger.exception("Error replacing topics of graph %d", graph_id)
        raise HTTPException(status_code=500, detail="Failed to update topics")

    if topics is None:
        raise HTTPException(status_code=404, detail="Graph not found")
    return {"graphId": graph_id, "topics": topics}


@app.delete("/graphs/{graph_id}")
@limiter.limit(WRITE_LIMIT)
async def delete_graph(request: Request, graph_id: int):
    """Delete a graph and its topics."""
    service = _ensure_service_available()
    try:
        deleted = await service.delete_graph(graph_id)
    except Exception:  # noqa: BLE001
        logger.exception("Error deleting graph %d", graph_id)
        raise HTTPException(status_code=500, detail="Failed to delete graph")

    if not deleted:
        raise HTTPException(status_code=404, detail="Graph not found")
    return {"graphId": graph_id}


@app.get(
    "/graphs/{graph_id}/topics/{topic_id}/related",
    response_model=RelatedTopicsResponse,
)
@limiter.limit(RELATED_LIMIT)
async def get_related_topics(request: Request, graph_id: int, topic_id: int):
    """
    Topics from other graphs related to a topic, sorted by score.

    Used for the "click node" details view.
    """
    service = _ensure_service_available()
    try:
        result = await service.get_related_topics(graph_id, topic_id)
    except Exception:  # noqa: BLE001
        logger.exception("Error computing related topics for %d/%d", graph_id, topic_id)
        raise HTTPException(status_code=500, detail="Failed to compute related topics")

    if result is None:
        raise HTTPException(status_code=404, detail="Topic not found in this graph")
    return result.to_dict()


@app.get("/api/monitoring/metrics")
@limiter.limit(READ_LIMIT)
async def get_metrics(request: Request):
    """Get API performance metrics."""
    window_seconds = request.query_params.get("window_seconds")
    try:
        window = float(window_seconds) if window_seconds else None
    except ValueError:
        raise HTTPException(status_code=400, detail="window_seconds must be a number")
    return get_api_metrics_summary(window_seconds=window)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=get_section("api").get("host", "0.0.0.0"), port=get_api_port())
