from dotenv import load_dotenv
import os

from barstatus.constants import DEFAULT_DATABASE_URI, DEFAULT_TIMEZONE, DEFAULT_TICK_INTERVAL_SECONDS

# Specify the path to your .env file
dotenv_path = os.path.join(os.path.dirname(__file__), '..', '.env')
load_dotenv(dotenv_path)

DATABASE_URI = os.getenv("DATABASE_URI", DEFAULT_DATABASE_URI)
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

# Wall-clock zone for every bar; the engine itself only sees naive local times
LOCAL_TIMEZONE = os.getenv("LOCAL_TIMEZONE", DEFAULT_TIMEZONE)
TICK_INTERVAL_SECONDS = int(os.getenv("TICK_INTERVAL_SECONDS", DEFAULT_TICK_INTERVAL_SECONDS))
