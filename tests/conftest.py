from datetime import date, datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from barstatus.db import Base
from barstatus.dependencies import get_db, get_now
from barstatus.engine import BarState, DailySchedule, WeeklySchedule, build_window
from barstatus.routes import app_router

# Monday
MONDAY = date(2026, 10, 19)


def make_day(on: date, open_time: str = "18:00", close_time: str = "02:00", is_open: bool = True) -> DailySchedule:
    return DailySchedule(date=on, is_open=is_open, open_time=open_time, close_time=close_time)


def open_every_day(today: date, open_time: str = "18:00", close_time: str = "02:00") -> WeeklySchedule:
    return build_window(today, default=make_day(today, open_time, close_time))


def make_bar(schedule: WeeklySchedule, **kwargs) -> BarState:
    return BarState(id=kwargs.pop('id', 'bar-1'), name=kwargs.pop('name', 'The Cozy Corner'),
                    schedule=schedule, **kwargs)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return Clock(datetime(2026, 10, 19, 12, 0))


@pytest.fixture
def client(session_factory, clock):
    app = FastAPI()
    app.include_router(app_router)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = clock
    return TestClient(app)
