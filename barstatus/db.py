from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from barstatus.config import DATABASE_URI, SQL_ECHO

connect_args = {}
if DATABASE_URI.startswith("sqlite"):
    # Sessions are opened from the scheduler thread as well as from request handlers
    connect_args["check_same_thread"] = False

engine = create_engine(DATABASE_URI, echo=SQL_ECHO, connect_args=connect_args)

Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
