"""
api/routes/venues.py
--------------------
GET /v1/venues/sample

Procedurally generated venue pool, for demos and for clients that have no
venue export of their own. The same seed always returns the same pool.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from datecourse.modules.tool_usage.venue_tool import VenueTool, venue_to_dict

router = APIRouter()


@router.get("/sample", summary="Generate a reproducible sample venue pool")
def sample_venues(
    seed: Optional[int] = Query(None, description="Generator seed (default VENUE_GENERATOR_SEED)"),
    count: int = Query(100, ge=1, le=5000),
) -> dict:
    tool = VenueTool(seed=seed)
    pool = tool.generate(count)
    return {
        "seed":   tool.seed,
        "count":  len(pool),
        "venues": [venue_to_dict(v) for v in pool],
    }
