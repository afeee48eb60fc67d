from dotenv import load_dotenv
import os

load_dotenv()

class Settings:
    def __init__(self) -> None:
        self.MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
        self.MONGODB_DB = os.getenv("MONGODB_DB", "unit_booking")
        self.BOOKING_STORE = os.getenv("BOOKING_STORE", "mongo").lower()
        self.BOOKING_TIMEZONE = os.getenv("BOOKING_TIMEZONE", "UTC")
        self.MAX_NIGHTS = int(os.getenv("MAX_NIGHTS", "365"))
        self.GUEST_NAME_MAX_LENGTH = int(os.getenv("GUEST_NAME_MAX_LENGTH", "100"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() in ("1", "true", "yes")
        self.LOG_FILE = os.getenv("LOG_FILE", "logs/unit_booking.log")
        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = int(os.getenv("PORT", "8000"))

settings = Settings()
