import csv
from unittest.mock import MagicMock

import pytest
import requests
from google.transit import gtfs_realtime_pb2

from vehicle_positions import crud
from vehicle_positions.config import Config

VEHICLE_POSITIONS_URL = "http://feeds.test/vehicle/vehiclepositions.pb"
TRIP_UPDATES_URL = "http://feeds.test/tripupdate/tripupdates.pb"

ROUTES = [
    ["route_id", "agency_id", "route_short_name", "route_long_name", "route_desc", "route_type", "route_url", "route_color", "route_text_color"],
    ["20643", "MARTA", "1", "Marietta Blvd/Joseph E Lowery Blvd", "", "3", "https://itsmarta.com/1.aspx", "FF00FF", "000000"],
    ["20644", "MARTA", "2", "Ponce de Leon Avenue / Druid Hills", "", "3", "https://itsmarta.com/2.aspx", "008000", "000000"],
    ["20645", "MARTA", "3", "Martin Luther King Jr Dr/Auburn Ave", "", "3", "https://itsmarta.com/3.aspx", "FF8000", "000000"],
    ["20708", "MARTA", "4", "Moreland Avenue", "", "3", "https://itsmarta.com/4.aspx", "FF00FF", "000000"],
]

SHAPES = [
    ["shape_id", "shape_pt_lat", "shape_pt_lon", "shape_pt_sequence", "shape_dist_traveled"],
    ["1", "37.123", "-122.456", "1", "0.0"],
    ["1", "37.456", "-122.789", "2", "2.0"],
]

STOPS = [
    ["stop_id", "stop_code", "stop_name", "stop_desc", "stop_lat", "stop_lon", "zone_id", "stop_url", "location_type", "parent_station", "stop_timezone", "wheelchair_boarding"],
    ["27", "907933", "HAMILTON E HOLMES STATION", "70 HAMILTON E HOLMES DR NW & CSX TRANSPORTATION", "33.754553", "-84.469302", "", "", "", "", "", "1"],
    ["28", "908023", "WEST LAKE STATION", "80 ANDERSON AVE NW & CSX TRANSPORTATION", "33.753328", "-84.445329", "", "", "", "", "", "1"],
    ["39", "907906", "WEST LAKE STATION", "80 ANDERSON AVE NW & CSX TRANSPORTATION", "33.753247", "-84.445568", "", "", "", "", "", "1"],
]


def write_csv(path, rows):
    with open(path, "w", newline="") as f:
        csv.writer(f).writerows(rows)
    return str(path)


def new_feed():
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "2.0"
    feed.header.timestamp = 1700000000
    return feed


def build_vehicle_positions_feed():
    feed = new_feed()

    entity = feed.entity.add()
    entity.id = "1"
    entity.vehicle.vehicle.id = "2301"
    entity.vehicle.vehicle.label = "1601"
    entity.vehicle.trip.trip_id = "8729521"
    entity.vehicle.trip.route_id = "20708"
    entity.vehicle.position.latitude = 33.75
    entity.vehicle.position.longitude = -84.375
    entity.vehicle.position.bearing = 90.0
    entity.vehicle.current_stop_sequence = 3
    entity.vehicle.stop_id = "42100"
    entity.vehicle.current_status = gtfs_realtime_pb2.VehiclePosition.STOPPED_AT
    entity.vehicle.timestamp = 1699999990
    entity.vehicle.occupancy_status = gtfs_realtime_pb2.VehiclePosition.MANY_SEATS_AVAILABLE

    entity = feed.entity.add()
    entity.id = "2"
    entity.vehicle.vehicle.id = "2302"
    entity.vehicle.vehicle.label = "1602"
    entity.vehicle.position.latitude = 33.5
    entity.vehicle.position.longitude = -84.25
    entity.vehicle.position.bearing = 180.0

    # alert-only entities carry no vehicle
    entity = feed.entity.add()
    entity.id = "3"
    entity.alert.header_text.translation.add().text = "Detour"

    return feed.SerializeToString()


def build_trip_updates_feed():
    feed = new_feed()

    entity = feed.entity.add()
    entity.id = "tu-1"
    entity.trip_update.trip.trip_id = "8729521"
    entity.trip_update.trip.route_id = "20708"
    entity.trip_update.vehicle.id = "2301"
    entity.trip_update.timestamp = 1699999995
    update = entity.trip_update.stop_time_update.add()
    update.stop_sequence = 4
    update.stop_id = "42100"
    update.arrival.delay = 0
    update.arrival.time = 1700000100
    update = entity.trip_update.stop_time_update.add()
    update.stop_sequence = 5
    update.stop_id = "42101"
    update.departure.delay = 60
    update.schedule_relationship = gtfs_realtime_pb2.TripUpdate.StopTimeUpdate.SKIPPED

    entity = feed.entity.add()
    entity.id = "tu-2"
    entity.trip_update.trip.trip_id = "8729600"
    entity.trip_update.trip.route_id = "20643"
    entity.trip_update.vehicle.id = "9999"

    return feed.SerializeToString()


def feed_response(content):
    response = MagicMock()
    response.content = content
    response.status_code = 200
    return response


@pytest.fixture
def feed_urls(monkeypatch):
    monkeypatch.setattr(Config, "VEHICLE_POSITIONS_URL", VEHICLE_POSITIONS_URL)
    monkeypatch.setattr(Config, "TRIP_UPDATES_URL", TRIP_UPDATES_URL)


@pytest.fixture
def mock_feeds(feed_urls, monkeypatch):
    """Serve the fixture feeds in place of the upstream endpoints."""
    payloads = {
        VEHICLE_POSITIONS_URL: build_vehicle_positions_feed(),
        TRIP_UPDATES_URL: build_trip_updates_feed(),
    }
    calls = []

    def fake_get(url, timeout=None):
        calls.append(url)
        return feed_response(payloads[url])

    monkeypatch.setattr(requests, "get", fake_get)
    return calls


@pytest.fixture
def failing_feeds(feed_urls, monkeypatch):
    def fake_get(url, timeout=None):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "get", fake_get)


@pytest.fixture
def gtfs_static_dir(tmp_path, monkeypatch):
    write_csv(tmp_path / "routes.txt", ROUTES)
    write_csv(tmp_path / "shapes.txt", SHAPES)
    write_csv(tmp_path / "stops.txt", STOPS)
    monkeypatch.setattr(Config, "GTFS_STATIC_PATH", str(tmp_path))
    return tmp_path


@pytest.fixture(autouse=True)
def empty_snapshot(monkeypatch):
    monkeypatch.setattr(crud, "current_bus_positions", [])
    monkeypatch.setattr(crud, "last_updated", None)
