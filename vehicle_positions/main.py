import functools
import io
import os
import signal
import time
from enum import Enum
from typing import List, Optional

import yaml
from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi_restful.tasks import repeat_every
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from . import crud, schemas
from .config import Config
from .utils import gtfs_rt_helper, gtfs_static_helper
from .utils.geojson_helper import convert_to_geojson, shapes_to_geojson
from .utils.gtfs_rt_helper import FeedError
from .utils.gtfs_static_helper import StaticDataError
from .utils.log_helper import logger, setup_logging
from .utils.metrics_helper import metric_path, observe_request


class FormatEnum(str, Enum):
    json = "json"
    geojson = "geojson"


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = metric_path(request.app.router.routes, request.scope)
        start = time.perf_counter()
        response = await call_next(request)
        observe_request(path, response.status_code, time.perf_counter() - start)
        return response


tags_metadata = [
    {"name": "Real-Time data", "description": "GTFS-RT vehicle positions and trip updates."},
    {"name": "Static data", "description": "GTFS Static data: routes, shapes and stops."},
    {"name": "Other data", "description": "Metrics and service metadata."},
]

app = FastAPI(title="Vehicle Positions API", version=Config.CURRENT_API_VERSION, openapi_tags=tags_metadata, docs_url="/")


@app.exception_handler(FeedError)
async def feed_exception_handler(request, err):
    base_error_message = f"Failed to execute: {request.method} {request.url}"
    return JSONResponse(status_code=502, content={"message": f"{base_error_message}. Detail: {err}"})

@app.exception_handler(StaticDataError)
async def static_data_exception_handler(request, err):
    base_error_message = f"Failed to execute: {request.method} {request.url}"
    return JSONResponse(status_code=500, content={"message": f"{base_error_message}. Detail: {err}"})


if os.path.isdir(Config.ASSETS_PATH):
    app.mount("/assets", StaticFiles(directory=Config.ASSETS_PATH), name="assets")


####################
#  Begin Routes
####################

#### Begin GTFS-RT Routes ####

@app.get("/bus-positions", tags=["Real-Time data"])
async def get_bus_positions(format: FormatEnum = Query(FormatEnum.json)):
    """
    Get the most recently fetched bus positions.
    """
    data = crud.get_current_bus_positions()
    if format == FormatEnum.geojson:
        return convert_to_geojson(data, properties=['id', 'label', 'bearing'])
    return data

@app.get("/trip-updates", tags=["Real-Time data"], response_model=List[schemas.TripUpdate])
def get_trip_updates():
    """
    Get all trip updates, fetched from the feed on every request.
    """
    return gtfs_rt_helper.get_trip_updates(Config.TRIP_UPDATES_URL)

@app.get("/route-visualization", tags=["Real-Time data"], response_model=schemas.RouteVisualization)
def get_route_visualization(route_id: Optional[str] = None):
    """
    Get route details, shapes, stops, live buses matched to their trip updates, and all trip updates.
    """
    if not route_id:
        raise HTTPException(status_code=400, detail="Route ID not provided")
    return crud.get_route_visualization(route_id)

#### END GTFS-RT Routes ####

### GTFS Static data ###

@app.get("/routes", tags=["Static data"], response_model=List[schemas.Route])
def get_routes():
    return gtfs_static_helper.parse_routes()

@app.get("/shapes", tags=["Static data"])
def get_shapes(format: FormatEnum = Query(FormatEnum.json)):
    shapes = gtfs_static_helper.parse_shapes()
    if format == FormatEnum.geojson:
        return shapes_to_geojson(shapes)
    return shapes

@app.get("/stops", tags=["Static data"])
def get_stops(format: FormatEnum = Query(FormatEnum.json)):
    stops = gtfs_static_helper.parse_stops()
    if format == FormatEnum.geojson:
        return convert_to_geojson(stops, properties=['stop_id', 'stop_code', 'stop_name', 'stop_desc'])
    return stops

#### END GTFS Static data endpoints ####

#### Begin Other data endpoints ####

@app.get("/metrics", tags=["Other data"])
def get_metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

@app.get('/openapi.yaml', include_in_schema=False)
@functools.lru_cache()
def read_openapi_yaml() -> Response:
    openapi_json = jsonable_encoder(app.openapi())
    yaml_s = io.StringIO()
    yaml.dump(openapi_json, yaml_s)
    return Response(yaml_s.getvalue(), media_type='text/yaml')


@app.on_event("startup")
def startup_event():
    setup_logging()
    logger.info(f"Vehicle Positions API {Config.CURRENT_API_VERSION} starting")
    # a feed failure here aborts startup
    crud.refresh_bus_positions()

def refresh_snapshot() -> None:
    try:
        crud.refresh_bus_positions()
    except FeedError as e:
        logger.critical(f"Failed to refresh bus positions: {e}")
        if Config.EXIT_ON_FEED_FAILURE:
            os.kill(os.getpid(), signal.SIGTERM)

@app.on_event("startup")
@repeat_every(seconds=Config.REALTIME_UPDATE_INTERVAL, wait_first=Config.REALTIME_UPDATE_INTERVAL)
def refresh_bus_positions_task() -> None:
    refresh_snapshot()


app.add_middleware(MetricsMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "DELETE", "HEAD", "OPTIONS"],
    allow_headers=["*"],
)


def run():
    import uvicorn
    uvicorn.run("vehicle_positions.main:app", host=os.environ.get("HOST", "0.0.0.0"), port=int(os.environ.get("PORT", 8080)))

if __name__ == "__main__":
    run()
