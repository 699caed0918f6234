from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from kiranawala.core.config import settings
import logging

logger = logging.getLogger("database")

# Embedded SQLite file holding the last-known-good copy of remote rows
engine = create_engine(
    settings.LOCAL_CACHE_URL,
    pool_pre_ping=True,
    echo=False,
    connect_args={"check_same_thread": False},
)

@event.listens_for(engine, "connect")
def receive_connect(dbapi_connection, connection_record):
    logger.info("Local cache connection established")

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all cache tables
Base = declarative_base()
