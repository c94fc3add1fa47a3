"""Process configuration read from the environment (and a local .env file)."""
import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "chat")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Presence
SWEEP_INTERVAL_SECONDS = float(os.getenv("SWEEP_INTERVAL_SECONDS", "15"))
INACTIVITY_TIMEOUT_MS = int(os.getenv("INACTIVITY_TIMEOUT_MS", "10000"))
