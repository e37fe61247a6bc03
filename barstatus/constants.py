from datetime import timedelta

DEFAULT_TIMEZONE = 'America/Chicago'
DEFAULT_DATABASE_URI = 'sqlite:///./bars.db'
DEFAULT_TICK_INTERVAL_SECONDS = 60

WINDOW_DAYS = 7
TRANSITION_WINDOW = timedelta(minutes=15)
MINUTES_PER_DAY = 24 * 60

DEFAULT_OPEN_TIME = "18:00"
DEFAULT_CLOSE_TIME = "02:00"

DATE_FORMAT = '%Y-%m-%d'
TIME_FORMAT = '%H:%M'
DISPLAY_TIME_FORMAT = '%I:%M %p'

SOURCE_SCHEDULE = "schedule"
SOURCE_MANUAL = "manual"

BAR_HOURS_CSV = 'bar hours.csv'
