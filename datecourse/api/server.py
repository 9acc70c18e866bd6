"""
api/server.py
-------------
FastAPI application entry point.

Run dev server:
    uvicorn datecourse.api.server:app --reload --port 8000

Endpoints:
    GET  /v1/health
    POST /v1/itinerary/generate
    POST /v1/itinerary/feedback
    GET  /v1/venues/sample
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from datecourse import config
from datecourse.api.routes import health, itinerary, venues

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Date Course Planner API",
    version="1.0.0",
    description=(
        "Greedy, time-aware date-course planner. Builds walkable or drivable "
        "itineraries from a venue pool and learns from like/dislike feedback."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# Allow the map frontend (any origin during development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router,     prefix="/v1",           tags=["Health"])
app.include_router(itinerary.router,  prefix="/v1/itinerary", tags=["Itinerary"])
app.include_router(venues.router,     prefix="/v1/venues",    tags=["Venues"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("datecourse.api.server:app", host="0.0.0.0", port=8000, reload=True)
