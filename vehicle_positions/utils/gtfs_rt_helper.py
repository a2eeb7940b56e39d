import requests
from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from ..config import Config
from ..schemas import (BusPosition, Position, StopTimeEvent, StopTimeUpdate,
                       TripDescriptor, TripUpdate, VehicleDescriptor, VehiclePosition)
from .log_helper import logger

VehicleStopStatus = gtfs_realtime_pb2.VehiclePosition.VehicleStopStatus
CongestionLevel = gtfs_realtime_pb2.VehiclePosition.CongestionLevel
OccupancyStatus = gtfs_realtime_pb2.VehiclePosition.OccupancyStatus
TripScheduleRelationship = gtfs_realtime_pb2.TripDescriptor.ScheduleRelationship
StopScheduleRelationship = gtfs_realtime_pb2.TripUpdate.StopTimeUpdate.ScheduleRelationship


class FeedError(Exception):
    """Raised when a GTFS-RT feed cannot be fetched or decoded"""
    def __init__(self, url, message):
        super().__init__(message)
        self.url = url


def fetch_feed(url, timeout=None):
    """
    Download a GTFS-RT feed and decode it into a FeedMessage.
    Every transport, HTTP status and protobuf failure surfaces as FeedError.
    """
    if timeout is None:
        timeout = Config.FEED_REQUEST_TIMEOUT
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error('Failed to fetch data from URL ' + url + ': ' + str(e))
        raise FeedError(url, 'Failed to fetch data from URL: ' + str(e)) from e

    feed = gtfs_realtime_pb2.FeedMessage()
    try:
        feed.ParseFromString(response.content)
    except DecodeError as e:
        logger.error('Failed to unmarshal data from URL ' + url + ': ' + str(e))
        raise FeedError(url, 'Failed to unmarshal data: ' + str(e)) from e
    return feed


#### Field mapping ####

def to_trip_descriptor(trip):
    return TripDescriptor(
        trip_id=trip.trip_id,
        route_id=trip.route_id,
        direction_id=trip.direction_id,
        start_time=trip.start_time,
        start_date=trip.start_date,
        schedule_relationship=TripScheduleRelationship.Name(trip.schedule_relationship),
    )

def to_vehicle_descriptor(vehicle):
    return VehicleDescriptor(id=vehicle.id, label=vehicle.label, license_plate=vehicle.license_plate)

def to_position(position):
    return Position(
        latitude=position.latitude,
        longitude=position.longitude,
        bearing=position.bearing,
        odometer=position.odometer,
        speed=position.speed,
    )

def to_stop_time_event(event):
    return StopTimeEvent(delay=event.delay, time=event.time, uncertainty=event.uncertainty)

def to_stop_time_update(update):
    return StopTimeUpdate(
        stop_sequence=update.stop_sequence,
        stop_id=update.stop_id,
        arrival=to_stop_time_event(update.arrival) if update.HasField('arrival') else None,
        departure=to_stop_time_event(update.departure) if update.HasField('departure') else None,
        schedule_relationship=StopScheduleRelationship.Name(update.schedule_relationship),
    )

def optional_field(message, field_name, mapper):
    if message.HasField(field_name):
        return mapper(getattr(message, field_name))
    return None


#### Vehicle positions ####

def decode_vehicle_positions(feed):
    vehicle_positions = []
    for entity in feed.entity:
        if not entity.HasField('vehicle'):
            continue
        vehicle = entity.vehicle
        vehicle_positions.append(VehiclePosition(
            trip=optional_field(vehicle, 'trip', to_trip_descriptor),
            vehicle=optional_field(vehicle, 'vehicle', to_vehicle_descriptor),
            position=optional_field(vehicle, 'position', to_position),
            current_stop_sequence=vehicle.current_stop_sequence,
            stop_id=vehicle.stop_id,
            current_status=VehicleStopStatus.Name(vehicle.current_status),
            timestamp=vehicle.timestamp,
            congestion_level=CongestionLevel.Name(vehicle.congestion_level),
            occupancy_status=OccupancyStatus.Name(vehicle.occupancy_status),
        ))
    return vehicle_positions

def to_bus_position(vehicle_position):
    vehicle = vehicle_position.vehicle or VehicleDescriptor()
    position = vehicle_position.position
    return BusPosition(
        id=vehicle.id,
        latitude=position.latitude if position else 0.0,
        longitude=position.longitude if position else 0.0,
        label=vehicle.label,
        bearing=position.bearing if position else 0.0,
    )

def get_vehicle_positions(url):
    return decode_vehicle_positions(fetch_feed(url))

def get_bus_positions(url):
    """Fetch the vehicle positions feed and flatten it into bus positions."""
    return [to_bus_position(vehicle_position) for vehicle_position in get_vehicle_positions(url)]


#### Trip updates ####

def decode_trip_updates(feed):
    trip_updates = []
    for entity in feed.entity:
        if not entity.HasField('trip_update'):
            continue
        trip_update = entity.trip_update
        trip_updates.append(TripUpdate(
            trip=optional_field(trip_update, 'trip', to_trip_descriptor),
            vehicle=optional_field(trip_update, 'vehicle', to_vehicle_descriptor),
            stop_time_update=[to_stop_time_update(update) for update in trip_update.stop_time_update],
            timestamp=trip_update.timestamp,
            delay=trip_update.delay,
        ))
    return trip_updates

def get_trip_updates(url):
    return decode_trip_updates(fetch_feed(url))
