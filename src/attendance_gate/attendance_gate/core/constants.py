"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_COOLDOWN_MINUTES = 15
EARTH_RADIUS_KM = 6371.0

GLOBAL_SCOPE = "global"

FORM_CONFIG_CACHE_TTL_SECONDS = 300
LOCATION_CACHE_TTL_SECONDS = 600
