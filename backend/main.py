"""
FastAPI Backend for the Light Posture Monitor
Serves the dashboard, the session export and the real-time observation stream
"""

from fastapi import FastAPI, HTTPException, Response, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from typing import List, Optional
from contextlib import asynccontextmanager
import asyncio
import logging
import socket
import time

from config import API_HOST, API_PORT, DASHBOARD_DIR
from logger import setup_logging
from models import Observation, ObservationBundle, ProcessorStatus, SessionStats, SerialStatus
from dispatcher import Dispatcher
from serial_reader import get_serial_reader, SerialReader

logger = logging.getLogger(__name__)

# Global instances
dispatcher = Dispatcher()
serial_reader: Optional[SerialReader] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    global serial_reader

    setup_logging()
    logger.info("Starting Light Posture Monitor backend...")

    dispatcher.start()

    # Serial reader feeds the dispatcher's queue
    serial_reader = get_serial_reader(dispatcher.sample_queue)

    # connect() sleeps while the Arduino resets, keep it off the event loop.
    # A missing device is not fatal; the API keeps serving without live data
    if await asyncio.to_thread(serial_reader.connect):
        serial_reader.start_reading()
        logger.info("Serial connection established")
    else:
        logger.warning("Could not connect to serial port. Running without live data.")

    yield

    logger.info("Shutting down...")
    if serial_reader:
        serial_reader.stop_reading()
    dispatcher.stop()


app = FastAPI(
    title="Light Posture Monitor API",
    description="Posture classification from an ambient-light sensor",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if DASHBOARD_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=DASHBOARD_DIR), name="static")


# ==================== API ENDPOINTS ====================

@app.get("/", include_in_schema=False)
def dashboard():
    """Dashboard page"""
    index = DASHBOARD_DIR / "index.html"
    if not index.is_file():
        raise HTTPException(status_code=404, detail="Dashboard not found")
    return FileResponse(index)


@app.get("/api/health")
def health():
    """API status"""
    return {
        "status": "running",
        "name": "Light Posture Monitor API",
        "version": "1.0.0",
        "serial_connected": serial_reader.is_running if serial_reader else False,
        "subscribers": dispatcher.broadcaster.subscriber_count
    }


@app.get("/api/export", response_model=ObservationBundle)
def export_session(response: Response, download: bool = False):
    """
    Export the session history as a collection bundle.
    Oldest observation first, at most the buffer capacity.
    """
    if download:
        response.headers["Content-Disposition"] = "attachment; filename=posture_session.json"
    return dispatcher.export_bundle()


@app.get("/api/observations/recent", response_model=List[Observation])
def get_recent_observations(limit: int = 50):
    """Most recent observations in chronological order"""
    return dispatcher.recent(limit)


@app.get("/api/status", response_model=ProcessorStatus)
def get_current_status():
    """Baseline, violation timer and last observation"""
    return dispatcher.current_status()


@app.get("/api/stats", response_model=SessionStats)
def get_session_stats():
    """Status counts and average score over the session buffer"""
    return dispatcher.session_stats()


@app.get("/api/serial/status", response_model=SerialStatus)
def get_serial_status():
    """Get serial connection status"""
    if serial_reader:
        return serial_reader.get_status()
    raise HTTPException(status_code=503, detail="Serial reader not initialized")


@app.post("/api/serial/reconnect")
def reconnect_serial():
    """Attempt to reconnect to serial port"""
    if not serial_reader:
        raise HTTPException(status_code=503, detail="Serial reader not initialized")

    serial_reader.stop_reading()
    time.sleep(1)

    if serial_reader.connect():
        serial_reader.start_reading()
        return {"success": True, "message": "Reconnected successfully"}
    return {"success": False, "message": "Failed to reconnect"}


@app.websocket("/ws")
async def observation_stream(websocket: WebSocket):
    """Push every new observation to the connected dashboard"""
    queue = dispatcher.broadcaster.subscribe()
    await websocket.accept()

    async def forward():
        while True:
            message = await queue.get()
            await websocket.send_json(message)

    sender = asyncio.create_task(forward())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        dispatcher.broadcaster.unsubscribe(queue)
        sender.cancel()
        await asyncio.gather(sender, return_exceptions=True)


# ==================== MAIN ====================

def port_available(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


if __name__ == "__main__":
    import uvicorn

    setup_logging()

    if not port_available(API_HOST, API_PORT):
        logger.error("Port %d is busy. Stop the other process or set API_PORT and try again.", API_PORT)
    else:
        logger.info("Server is live at http://localhost:%d", API_PORT)
        uvicorn.run(app, host=API_HOST, port=API_PORT)
