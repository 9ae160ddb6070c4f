import os


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def db_config(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "attendance_gate"),
        "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
    }


# Deployment-wide, not per course.
COOLDOWN_MINUTES = float(os.getenv("COOLDOWN_MINUTES", "15"))
COOLDOWN_PER_COURSE = env_flag("COOLDOWN_PER_COURSE")

DEFAULT_LOCATION = {
    "latitude": float(os.getenv("DEFAULT_LATITUDE", "33.1751332")),
    "longitude": float(os.getenv("DEFAULT_LONGITUDE", "131.6138803")),
    "radius_km": float(os.getenv("DEFAULT_RADIUS_KM", "0.5")),
    "label": os.getenv("DEFAULT_LOCATION_LABEL", ""),
}

FORM_CONFIG_CACHE_TTL = int(os.getenv("FORM_CONFIG_CACHE_TTL", "300"))
LOCATION_CACHE_TTL = int(os.getenv("LOCATION_CACHE_TTL", "600"))
