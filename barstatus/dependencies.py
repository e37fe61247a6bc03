from barstatus.db import Session
from barstatus.utils import local_now


def get_db():
    db = Session()
    try:
        yield db
    finally:
        db.close()


def get_now():
    """Wall-clock instant a request is evaluated at."""
    return local_now()
