from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from unit_booking.db.mongo_client import init_indexes
from unit_booking.routes.bookings import router as bookings_router, validation_exception_handler
import logging
import os
from logging.handlers import RotatingFileHandler
from unit_booking.config import settings

def configure_logging():
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
    if settings.LOG_TO_FILE:
        log_dir = os.path.dirname(settings.LOG_FILE)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        # avoid duplicate handlers on reload
        if not any(isinstance(h, RotatingFileHandler) and getattr(h, 'baseFilename', None) == os.path.abspath(settings.LOG_FILE) for h in root.handlers):
            handler = RotatingFileHandler(settings.LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=3, encoding='utf-8')
            fmt = logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s')
            handler.setFormatter(fmt)
            root.addHandler(handler)

configure_logging()

app = FastAPI(title="Unit Booking API")

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.include_router(bookings_router)

@app.get("/")
def root():
    return {"message": "OK"}

@app.get("/health")
def health():
    return {"ok": True}

@app.on_event("startup")
def startup():
    if settings.BOOKING_STORE == "mongo":
        init_indexes()
