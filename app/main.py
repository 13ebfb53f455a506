import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.models.schemas import RouteSearchRequest, SearchSnapshot
from app.services.geocode_client import GeocodeClient
from app.services.route_client import RouteClient
from app.services.sessions import SessionStore

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    geocoder = GeocodeClient(
        base_url=settings.geocode_url,
        user_agent=settings.geocode_user_agent,
        timeout=settings.http_timeout,
    )
    router = RouteClient(base_url=settings.route_url, timeout=settings.http_timeout)
    app.state.sessions = SessionStore(
        geocoder,
        router,
        fit_padding_px=settings.fit_padding_px,
        max_sessions=settings.max_sessions,
    )
    logger.info("Route finder ready (geocode=%s, route=%s)", settings.geocode_url, settings.route_url)
    try:
        yield
    finally:
        await geocoder.aclose()
        await router.aclose()


# Initialize FastAPI app
app = FastAPI(title="Route Finder", version="1.0.0", lifespan=lifespan)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


# Routes

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "timestamp": datetime.now().isoformat()}


@app.post("/search/route", response_model=SearchSnapshot)
async def search_route(request: RouteSearchRequest, sessions: SessionStore = Depends(get_sessions)) -> SearchSnapshot:
    """Geocode both places, route between them and return the session's map state.

    A failed search is still a 200: the snapshot carries state "failed" and the
    message to show. Overlays from the last successful search stay in place.
    """
    session = sessions.get_or_create(request.sessionId)
    await session.orchestrator.run(request.start, request.destination)
    return session.snapshot()


@app.get("/search/route/{session_id}", response_model=SearchSnapshot)
async def get_route_state(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> SearchSnapshot:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Unknown session")
    return session.snapshot()


@app.delete("/search/route/{session_id}", response_model=SearchSnapshot)
async def reset_route_state(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> SearchSnapshot:
    session = sessions.reset(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Unknown session")
    return session.snapshot()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8003)
