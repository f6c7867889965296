from __future__ import annotations

import logging

import aiohttp
from fastapi import FastAPI, HTTPException, Query

from walkspot.config import get_settings
from walkspot.models import SearchResponse, SliderBounds, TargetDistance, Unit
from walkspot.services.cards import build_cards
from walkspot.services.categories import list_categories
from walkspot.services.overpass import OverpassUnavailableError, fetch_elements
from walkspot.services.planner import SLIDER_CONFIG, clamp_to_slider, convert_slider_value, search_radius_m
from walkspot.services.query import build_overpass_query
from walkspot.services.selector import select_candidates

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

NO_SPOTS_DETAIL = "No spots found nearby. Try changing your target."

app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Suggests nearby spots reachable by a walk of roughly a target length, using OpenStreetMap data.",
)


@app.get("/", tags=["Root"])
async def root():
    return {"ok": True, "service": settings.app_name, "version": settings.version}


@app.get("/health", tags=["Healthcheck"])
async def health():
    return {"ok": True}


@app.get("/api/categories", tags=["Api Categories"])
async def api_categories():
    return {"categories": list_categories()}


@app.get("/api/slider", response_model=dict[Unit, SliderBounds], tags=["Api Slider"])
async def api_slider():
    return SLIDER_CONFIG


@app.get("/api/slider/convert", tags=["Api Slider"])
async def api_slider_convert(
    value: float = Query(..., ge=0.0, description="Current slider value in the other unit"),
    to_unit: Unit = Query(...),
):
    return {"unit": to_unit, "value": convert_slider_value(value, to_unit)}


@app.get("/api/search", response_model=SearchResponse, tags=["Api Search"])
async def api_search(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    value: float = Query(..., gt=0.0, description="Target walk, one way, in steps or km"),
    unit: Unit = Query(Unit.steps),
):
    target = TargetDistance.from_value(clamp_to_slider(value, unit), unit)
    radius_m = search_radius_m(
        target.km,
        tolerance_ratio=settings.tolerance_ratio,
        min_radius_m=settings.min_search_radius_m,
        max_radius_m=settings.max_search_radius_m,
    )
    query = build_overpass_query(lat, lon, radius_m, max_spots=settings.max_spots)

    async with aiohttp.ClientSession() as session:
        try:
            elements = await fetch_elements(session, query)
        except OverpassUnavailableError as e:
            logger.error("Spot search failed: %s", e)
            raise HTTPException(status_code=502, detail="Overpass is unavailable, please try again.")

    if not elements:
        raise HTTPException(status_code=404, detail=NO_SPOTS_DETAIL)

    selection = select_candidates(
        elements,
        lat,
        lon,
        target,
        tolerance_ratio=settings.tolerance_ratio,
        max_spots=settings.max_spots,
        name_language=settings.name_language,
    )
    if not selection.candidates:
        raise HTTPException(status_code=404, detail=NO_SPOTS_DETAIL)

    return SearchResponse(
        target_km=target.km,
        radius_m=round(radius_m),
        used_fallback=selection.used_fallback,
        spots=build_cards(selection, walk_speed_kmh=settings.walk_speed_kmh),
    )
