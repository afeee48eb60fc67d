from pymongo import MongoClient, ASCENDING
from pymongo.database import Database
import logging
from unit_booking.config import settings

logger = logging.getLogger(__name__)

_client: MongoClient | None = None
_db: Database | None = None

def get_client() -> MongoClient:
    global _client
    if _client is None:
        _client = MongoClient(settings.MONGODB_URI, tz_aware=False)
    return _client

def get_db() -> Database:
    global _db
    if _db is None:
        _db = get_client()[settings.MONGODB_DB]
    return _db

def init_indexes(db: Database | None = None) -> None:
    db = db if db is not None else get_db()
    # conflict queries narrow by unit or guest, then by check-in
    db.bookings.create_index([("unit_id", ASCENDING), ("check_in", ASCENDING)])
    db.bookings.create_index([("guest_name", ASCENDING), ("check_in", ASCENDING)])
    logger.info("booking indexes ready on %s", db.name)
