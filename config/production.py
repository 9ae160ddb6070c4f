import os

from .base import *  # noqa: F401,F403
from .base import db_config, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config()

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Never bypass the geofence in production.
GEOFENCE_BYPASS = False

AUTO_INIT_DB = env_flag("AUTO_INIT_DB")
