# seacontext_app.py
import logging
from typing import Optional
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import ORJSONResponse, JSONResponse
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.openapi.utils import get_openapi
from contextlib import asynccontextmanager
from pydantic import BaseModel

from seacontext import Cfg, Context, ContextResolver, FetchFailed

# =========================
# Config & runtime
# =========================

cfg = Cfg()

logger = logging.getLogger("seacontext.app")
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

class RT:
    # created lazily so tests can swap in a resolver backed by fake feeds
    resolver: Optional[ContextResolver] = None

rt = RT()

def _err(msg: str, code: int = 400):
    raise HTTPException(code, msg)

def _resolver() -> ContextResolver:
    if rt.resolver is None:
        rt.resolver = ContextResolver(cfg)
    return rt.resolver

def _check_coords(lat: float, lon: float):
    if not -90 <= lat <= 90:
        _err(f"Latitude {lat} out of bounds [-90, 90].")
    if not -180 <= lon <= 180:
        _err(f"Longitude {lon} out of bounds [-180, 180].")

def _reference(now: Optional[str]):
    if not now:
        return None
    try:
        return _resolver().local_reference(now)
    except ValueError:
        _err("Invalid 'now' format. Use ISO-8601, e.g. 2025-08-23T13:10:00+09:00.")

# =========================
# FastAPI app & docs
# =========================

@asynccontextmanager
async def lifespan(app: FastAPI):
    _resolver()
    yield
    if rt.resolver is not None:
        rt.resolver.close()
        rt.resolver = None

app = FastAPI(docs_url=None, lifespan=lifespan, default_response_class=ORJSONResponse)

def generate_custom_openapi():
    if app.openapi_schema: return app.openapi_schema
    openapi_schema = get_openapi(
        title="Marine Context API",
        version="0.1.0",
        description=(
            "Current/near-term marine conditions for a coordinate, resolved from tide, observation, "
            "forecast and water-temperature feeds.\n\n"
            "* Context: wave height/period/direction, wind speed/direction, water and air temperature, sky, "
            "next tide event and next sunrise/sunset, relative to `now` (default: current time in "
            f"{cfg.TIMEZONE}).\n"
            "* Visibility: Open-Meteo hourly visibility closest to `now`, in km.\n"
            "* Any upstream feed failure is reported as 502.\n"
        ),
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema

@app.get("/api/swagger/marine/openapi.json", include_in_schema=False)
async def custom_openapi(): return JSONResponse(generate_custom_openapi())

@app.get("/api/swagger/marine", include_in_schema=False)
async def custom_swagger_ui_html():
    return get_swagger_ui_html(openapi_url="/api/swagger/marine/openapi.json", title="Marine Context API Docs")

class VisibilityOut(BaseModel):
    visibility_km: Optional[str] = None

# =========================
# Endpoints
# =========================

# plain `def` so the blocking fan-out runs in FastAPI's threadpool
@app.get("/api/marine/context", response_model=Context, tags=["Marine"], summary="Resolve marine conditions at a point")
def read_context(
    lat: float = Query(..., description="Latitude [-90,90]"),
    lon: float = Query(..., description="Longitude [-180,180]"),
    now: Optional[str] = Query(None, description="Reference instant (ISO-8601); naive values are local time"),
):
    """
    Fetch the tide, current-observation, forecast and water-temperature feeds in parallel and reduce them to
    one Context. Forecast values are preferred; blank ones fall back to the latest observation.
    """
    _check_coords(lat, lon)
    reference = _reference(now)
    try:
        ctx = _resolver().resolve(lat, lon, reference)
    except FetchFailed as exc:
        logger.warning("context resolution failed lat=%s lon=%s: %s", lat, lon, exc)
        _err(f"Upstream feed unavailable: {exc.url}", 502)
    return ORJSONResponse(ctx.model_dump(mode="json"))

@app.get("/api/marine/visibility", response_model=VisibilityOut, tags=["Marine"], summary="Visibility (km) closest to now")
def read_visibility(
    lat: float = Query(..., description="Latitude [-90,90]"),
    lon: float = Query(..., description="Longitude [-180,180]"),
    now: Optional[str] = Query(None, description="Reference instant (ISO-8601); naive values are local time"),
):
    _check_coords(lat, lon)
    reference = _reference(now)
    try:
        km = _resolver().resolve_visibility(lat, lon, reference)
    except FetchFailed as exc:
        logger.warning("visibility lookup failed lat=%s lon=%s: %s", lat, lon, exc)
        _err(f"Upstream feed unavailable: {exc.url}", 502)
    return ORJSONResponse({"visibility_km": km})
