import uvicorn
from unit_booking.config import settings

def run() -> None:
    uvicorn.run("unit_booking.main:app", host=settings.HOST, port=settings.PORT)

if __name__ == "__main__":
    run()
