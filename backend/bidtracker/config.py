import os

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Comma-separated list of allowed browser origins.
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# Actor recorded on audit events when the caller does not identify itself.
DEFAULT_ACTOR = os.getenv("DEFAULT_ACTOR", "admin").strip() or "admin"
