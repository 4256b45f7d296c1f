"""
Configuration settings for the Light Posture Monitor
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Serial port configuration
SERIAL_PORT = os.getenv("SERIAL_PORT", "/dev/cu.usbmodem143101")
BAUD_RATE = int(os.getenv("BAUD_RATE", "9600"))
SERIAL_RESET_DELAY = float(os.getenv("SERIAL_RESET_DELAY", "2"))  # Arduino resets on connect

# Posture classification thresholds
INITIAL_BASELINE = float(os.getenv("INITIAL_BASELINE", "864"))
PRIMARY_THRESHOLD = int(os.getenv("PRIMARY_THRESHOLD", "500"))  # light below this = poor
VIOLATION_RATIO = float(os.getenv("VIOLATION_RATIO", "0.7"))  # fraction of baseline
DEBOUNCE_SECONDS = float(os.getenv("DEBOUNCE_SECONDS", "10"))
WARNING_DISTANCE = int(os.getenv("WARNING_DISTANCE", "23"))  # virtual cm
BASELINE_ADAPTATION = float(os.getenv("BASELINE_ADAPTATION", "0.05"))

# Virtual distance mapping: round(light / SENSOR_RANGE * DISTANCE_SCALE)
SENSOR_RANGE = int(os.getenv("SENSOR_RANGE", "1024"))
DISTANCE_SCALE = int(os.getenv("DISTANCE_SCALE", "60"))

# Session history
SESSION_BUFFER_CAPACITY = int(os.getenv("SESSION_BUFFER_CAPACITY", "200"))

# Real-time broadcast
BROADCAST_QUEUE_SIZE = int(os.getenv("BROADCAST_QUEUE_SIZE", "100"))  # per subscriber

# Time and logging
TIMEZONE = os.getenv("TIMEZONE", "UTC")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# API settings
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "3000"))
DASHBOARD_DIR = Path(os.getenv("DASHBOARD_DIR", str(Path(__file__).parent / "public")))
