from datetime import datetime

from .config import Config
from .schemas import BusVisualization, RouteVisualization
from .utils import gtfs_rt_helper, gtfs_static_helper
from .utils.log_helper import logger
from .utils.metrics_helper import bus_count

# latest snapshot, replaced wholesale on every refresh
current_bus_positions = []
last_updated = None

def refresh_bus_positions():
    global current_bus_positions, last_updated
    buses = gtfs_rt_helper.get_bus_positions(Config.VEHICLE_POSITIONS_URL)
    bus_count.set(len(buses))
    current_bus_positions = buses
    last_updated = datetime.now()
    logger.info(f"Updated bus positions! ({len(buses)} buses)")
    return buses

def get_current_bus_positions():
    return current_bus_positions

def find_route(routes, route_id):
    for route in routes:
        if route.id == route_id:
            return route
    return None

def match_trip_update(bus, trip_updates):
    for trip_update in trip_updates:
        if trip_update.vehicle is not None and trip_update.vehicle.id == bus.id:
            return trip_update
    return None

def build_bus_visualizations(buses, trip_updates):
    bus_visualizations = []
    for bus in buses:
        trip_update = match_trip_update(bus, trip_updates)
        if trip_update is None:
            continue
        bus_visualizations.append(BusVisualization(
            bus_position=bus,
            trip_info=trip_update.trip,
            stop_sequences=trip_update.stop_time_update,
        ))
    return bus_visualizations

def get_route_visualization(route_id):
    """
    Combine the static tables for a route with live bus positions and trip updates.
    Bus positions are fetched fresh rather than read from the snapshot.
    """
    routes = gtfs_static_helper.parse_routes()
    shapes = gtfs_static_helper.parse_shapes()
    stops = gtfs_static_helper.parse_stops()

    buses = gtfs_rt_helper.get_bus_positions(Config.VEHICLE_POSITIONS_URL)
    bus_count.set(len(buses))
    trip_updates = gtfs_rt_helper.get_trip_updates(Config.TRIP_UPDATES_URL)

    return RouteVisualization(
        route_info=find_route(routes, route_id),
        shapes=shapes,
        stops=stops,
        buses=build_bus_visualizations(buses, trip_updates),
        trip_updates=trip_updates,
    )
