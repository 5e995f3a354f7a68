# impostor/config.py
import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./impostor.db")

# Room defaults
MAX_PLAYERS = int(os.getenv("MAX_PLAYERS", "15"))
MAX_ROUNDS = int(os.getenv("MAX_ROUNDS", "999"))

# Cleanup sweep
STALE_ROOM_MINUTES = int(os.getenv("STALE_ROOM_MINUTES", "60"))
DISCONNECT_TIMEOUT_SECONDS = int(os.getenv("DISCONNECT_TIMEOUT_SECONDS", "30"))
CLEANUP_INTERVAL_SECONDS = int(os.getenv("CLEANUP_INTERVAL_SECONDS", "300"))  # 0 disables

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
