import os
import logging

from . import __version__

MARTA_VEHICLE_POSITIONS_URL = "https://gtfs-rt.itsmarta.com/TMGTFSRealTimeWebService/vehicle/vehiclepositions.pb"
MARTA_TRIP_UPDATES_URL = "https://gtfs-rt.itsmarta.com/TMGTFSRealTimeWebService/tripupdate/tripupdates.pb"

def get_bool_from_env(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')

def get_int_from_env(name, default):
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        logging.info('Invalid value for ' + name + ', using default ' + str(default))
        return default

class Config:
    VEHICLE_POSITIONS_URL = os.environ.get('VEHICLE_POSITIONS_URL', MARTA_VEHICLE_POSITIONS_URL)
    TRIP_UPDATES_URL = os.environ.get('TRIP_UPDATES_URL', MARTA_TRIP_UPDATES_URL)
    GTFS_STATIC_PATH = os.environ.get('GTFS_STATIC_PATH', './google_transit')
    ROUTES_FILE = 'routes.txt'
    SHAPES_FILE = 'shapes.txt'
    STOPS_FILE = 'stops.txt'
    ASSETS_PATH = os.environ.get('ASSETS_PATH', './assets')
    REALTIME_UPDATE_INTERVAL = get_int_from_env('REALTIME_UPDATE_INTERVAL', 15)
    FEED_REQUEST_TIMEOUT = get_int_from_env('FEED_REQUEST_TIMEOUT', 30)
    EXIT_ON_FEED_FAILURE = get_bool_from_env('EXIT_ON_FEED_FAILURE', True)
    CURRENT_API_VERSION = os.environ.get('CURRENT_API_VERSION', __version__)
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOGZIO_TOKEN = os.environ.get('LOGZIO_TOKEN')
    LOGZIO_URL = os.environ.get('LOGZIO_URL')
    RUNNING_ENV = os.environ.get('RUNNING_ENV')
