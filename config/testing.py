from .base import *  # noqa: F401,F403
from .base import db_config

SECRET_KEY = "test-secret"

DB_CONFIG = db_config()

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

GEOFENCE_BYPASS = False
AUTO_INIT_DB = False
