from typing import List, Optional

from pydantic import BaseModel

#### GTFS-RT schemas ####

class TripDescriptor(BaseModel):
    trip_id: str = ""
    route_id: str = ""
    direction_id: int = 0
    start_time: str = ""
    start_date: str = ""
    schedule_relationship: str = "SCHEDULED"

class VehicleDescriptor(BaseModel):
    id: str = ""
    label: str = ""
    license_plate: str = ""

class Position(BaseModel):
    latitude: float
    longitude: float
    bearing: float = 0.0
    odometer: float = 0.0
    speed: float = 0.0

class VehiclePosition(BaseModel):
    trip: Optional[TripDescriptor] = None
    vehicle: Optional[VehicleDescriptor] = None
    position: Optional[Position] = None
    current_stop_sequence: int = 0
    stop_id: str = ""
    current_status: str = "IN_TRANSIT_TO"
    timestamp: int = 0
    congestion_level: str = "UNKNOWN_CONGESTION_LEVEL"
    occupancy_status: str = "EMPTY"

class BusPosition(BaseModel):
    """Flattened view of a vehicle position, as served by /bus-positions."""
    id: str
    latitude: float
    longitude: float
    label: str
    bearing: float

class StopTimeEvent(BaseModel):
    delay: int = 0
    time: int = 0
    uncertainty: int = 0

class StopTimeUpdate(BaseModel):
    stop_sequence: int = 0
    stop_id: str = ""
    arrival: Optional[StopTimeEvent] = None
    departure: Optional[StopTimeEvent] = None
    schedule_relationship: str = "SCHEDULED"

class TripUpdate(BaseModel):
    trip: Optional[TripDescriptor] = None
    vehicle: Optional[VehicleDescriptor] = None
    stop_time_update: List[StopTimeUpdate] = []
    timestamp: int = 0
    delay: int = 0

#### GTFS static schemas ####

class Route(BaseModel):
    id: str
    short_name: str = ""
    long_name: str = ""
    color: str = ""
    text_color: str = ""

class Shape(BaseModel):
    shape_id: str
    latitude: float
    longitude: float
    sequence: int
    dist_traveled: float = 0.0

class Stop(BaseModel):
    stop_id: str
    stop_code: str = ""
    stop_name: str = ""
    stop_desc: str = ""
    latitude: float
    longitude: float

#### Joined views ####

class BusVisualization(BaseModel):
    bus_position: BusPosition
    trip_info: Optional[TripDescriptor] = None
    stop_sequences: List[StopTimeUpdate] = []

class RouteVisualization(BaseModel):
    route_info: Optional[Route] = None
    shapes: List[Shape] = []
    stops: List[Stop] = []
    buses: List[BusVisualization] = []
    trip_updates: List[TripUpdate] = []
