"""FastAPI application serving the stolen-vehicle aggregates."""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from api import queries
from api.models import CountRow, FilterOptions, RegionRow, SummaryRow, TrendRow

app = FastAPI(
    title="Stolen Vehicles API",
    description="Theft counts by region, vehicle type, color, make type and month",
    version="0.1.0",
)


@app.exception_handler(queries.MissingAggregateError)
def missing_aggregate(request: Request, exc: queries.MissingAggregateError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.get("/")
def root():
    return {
        "message": "Stolen Vehicles API",
        "endpoints": [
            "/filters", "/summary", "/regions", "/trends",
            "/vehicle-types", "/colors", "/make-types",
            "/day-types", "/segments",
        ],
    }


@app.get("/filters", response_model=FilterOptions)
def filters():
    """Available regions and vehicle types."""
    return queries.get_filter_options()


@app.get("/summary", response_model=list[SummaryRow])
def summary(
    region: str | None = Query(None, description="Region name"),
    vehicle_type: str | None = Query(None, description="Vehicle type"),
):
    """Thefts, color variety and unique makes per (region, vehicle type)."""
    return queries.get_summary(region, vehicle_type)


@app.get("/regions", response_model=list[RegionRow])
def regions():
    return queries.get_regions()


@app.get("/trends", response_model=list[TrendRow])
def trends(region: str | None = Query(None, description="Region name")):
    """Locations whose monthly theft count rose into the next observed month."""
    return queries.get_trends(region)


@app.get("/vehicle-types", response_model=list[CountRow])
def vehicle_types():
    return queries.get_vehicle_types()


@app.get("/colors", response_model=list[CountRow])
def colors():
    return queries.get_colors()


@app.get("/make-types", response_model=list[CountRow])
def make_types():
    return queries.get_make_types()


@app.get("/day-types", response_model=list[CountRow])
def day_types():
    return queries.get_day_types()


@app.get("/segments", response_model=list[CountRow])
def segments():
    return queries.get_segments()


def serve(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Serve the API with uvicorn."""
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    serve()
