import csv
import os

from ..config import Config
from ..schemas import Route, Shape, Stop
from .log_helper import logger


class StaticDataError(Exception):
    """Raised when a GTFS static file is missing or malformed"""
    def __init__(self, path, message):
        super().__init__(message)
        self.path = path


def static_file_path(file_name):
    return os.path.join(Config.GTFS_STATIC_PATH, file_name)

def parse_float(value, default=None):
    value = (value or '').strip()
    if value == '' and default is not None:
        return default
    return float(value)

def parse_int(value):
    # short rows leave trailing columns as None
    return int((value or '').strip())

def read_rows(file_obj, required_columns):
    reader = csv.DictReader(file_obj)
    header = reader.fieldnames or []
    missing = [column for column in required_columns if column not in header]
    if missing:
        raise ValueError('missing columns: ' + ', '.join(missing))
    return reader

def parse_file(path, parser):
    try:
        with open(path, newline='', encoding='utf-8-sig') as file_obj:
            return parser(file_obj)
    except (OSError, ValueError, csv.Error) as e:
        logger.error('Failed to parse ' + path + ': ' + str(e))
        raise StaticDataError(path, 'Failed to parse ' + os.path.basename(path) + ': ' + str(e)) from e


#### routes.txt ####

def parse_routes_from_reader(file_obj):
    routes = []
    for row in read_rows(file_obj, ['route_id']):
        routes.append(Route(
            id=row['route_id'],
            short_name=row.get('route_short_name') or '',
            long_name=row.get('route_long_name') or '',
            color=row.get('route_color') or '',
            text_color=row.get('route_text_color') or '',
        ))
    return routes

def parse_routes(path=None):
    return parse_file(path or static_file_path(Config.ROUTES_FILE), parse_routes_from_reader)


#### shapes.txt ####

def parse_shapes_from_reader(file_obj):
    shapes = []
    for row in read_rows(file_obj, ['shape_id', 'shape_pt_lat', 'shape_pt_lon', 'shape_pt_sequence']):
        shapes.append(Shape(
            shape_id=row['shape_id'],
            latitude=parse_float(row['shape_pt_lat']),
            longitude=parse_float(row['shape_pt_lon']),
            sequence=parse_int(row['shape_pt_sequence']),
            # an unparseable distance reads as zero, like an absent one
            dist_traveled=parse_dist_traveled(row.get('shape_dist_traveled')),
        ))
    return shapes

def parse_dist_traveled(value):
    try:
        return parse_float(value, default=0.0)
    except ValueError:
        return 0.0

def parse_shapes(path=None):
    return parse_file(path or static_file_path(Config.SHAPES_FILE), parse_shapes_from_reader)


#### stops.txt ####

def parse_stops_from_reader(file_obj):
    stops = []
    for row in read_rows(file_obj, ['stop_id', 'stop_lat', 'stop_lon']):
        stops.append(Stop(
            stop_id=row['stop_id'],
            stop_code=row.get('stop_code') or '',
            stop_name=row.get('stop_name') or '',
            stop_desc=row.get('stop_desc') or '',
            latitude=parse_float(row['stop_lat']),
            longitude=parse_float(row['stop_lon']),
        ))
    return stops

def parse_stops(path=None):
    return parse_file(path or static_file_path(Config.STOPS_FILE), parse_stops_from_reader)
