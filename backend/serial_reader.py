"""
Serial port reader for live Arduino data
"""

import logging
import re
import serial
import threading
import time
from typing import Optional
from datetime import datetime
from queue import Queue

from config import SERIAL_PORT, BAUD_RATE, SERIAL_RESET_DELAY
from models import LightSample, SerialStatus
from utils import now_local

logger = logging.getLogger(__name__)

INTEGER_FIELD = re.compile(r"[+-]?[0-9]+")


def parse_frame(line: str, received_at: Optional[datetime] = None) -> Optional[LightSample]:
    """
    Decode one line from the Arduino into a light sample.
    Expected format: sensorA,light
    Example: 41,812

    The first field is accepted but never validated. Returns None for
    empty lines, lines with fewer than two fields and lines whose second
    field is not a plain ASCII base-10 integer.
    """
    line = line.strip()
    if not line:
        return None

    parts = line.split(",")
    if len(parts) < 2:
        return None

    field = parts[1].strip()
    if not INTEGER_FIELD.fullmatch(field):
        return None
    light = int(field)

    return LightSample(
        light=light,
        raw=line,
        received_at=received_at or now_local()
    )


class SerialReader:
    """
    Reads comma-separated frames from Arduino via serial port.
    Runs in a separate thread and hands decoded samples to a queue.
    """

    def __init__(self, port: str = SERIAL_PORT, baud_rate: int = BAUD_RATE,
                 sample_queue: Optional[Queue] = None):
        self.port = port
        self.baud_rate = baud_rate
        self.serial_connection: Optional[serial.Serial] = None
        self.is_running = False
        self.read_thread: Optional[threading.Thread] = None

        # Queue consumed by the dispatcher
        self.sample_queue: Queue = sample_queue if sample_queue is not None else Queue()

        self.lines_read = 0

    def connect(self) -> bool:
        """
        Establish connection to the serial port.
        Returns True if successful, False otherwise.
        """
        try:
            self.serial_connection = serial.Serial(
                port=self.port,
                baudrate=self.baud_rate,
                timeout=1
            )
            logger.info("Connected to %s at %d baud", self.port, self.baud_rate)

            # Wait for Arduino to reset after connection
            time.sleep(SERIAL_RESET_DELAY)

            # Clear any startup messages
            self.serial_connection.reset_input_buffer()

            return True

        except serial.SerialException as e:
            logger.error("Could not open serial port %s: %s. Check the Arduino connection and port name.",
                         self.port, e)
            return False

    def disconnect(self):
        """Close the serial connection"""
        if self.serial_connection and self.serial_connection.is_open:
            self.serial_connection.close()
            logger.info("Disconnected from %s", self.port)

    def handle_line(self, line: str) -> Optional[LightSample]:
        """Decode a line and enqueue it if valid"""
        self.lines_read += 1
        sample = parse_frame(line)

        if sample is None:
            logger.debug("Dropped frame %r", line)
            return None

        self.sample_queue.put(sample)
        return sample

    def _read_loop(self):
        """Main reading loop - runs in separate thread"""
        logger.info("Serial reading started")

        while self.is_running:
            try:
                if self.serial_connection and self.serial_connection.in_waiting > 0:
                    line = self.serial_connection.readline().decode('utf-8', errors='ignore')
                    self.handle_line(line)
                else:
                    # Small delay to prevent busy waiting
                    time.sleep(0.05)

            except (serial.SerialException, OSError) as e:
                logger.error("Error reading from serial: %s", e)
                time.sleep(0.5)

        logger.info("Serial reading stopped")

    def start_reading(self):
        """Start the background reading thread"""
        if self.is_running:
            logger.info("Already reading")
            return

        if not self.serial_connection or not self.serial_connection.is_open:
            if not self.connect():
                logger.warning("Failed to connect. Cannot start reading.")
                return

        self.is_running = True
        self.read_thread = threading.Thread(target=self._read_loop, name="serial-reader", daemon=True)
        self.read_thread.start()

    def stop_reading(self):
        """Stop the background reading thread"""
        self.is_running = False

        if self.read_thread:
            self.read_thread.join(timeout=2)
            self.read_thread = None

        self.disconnect()

    def get_status(self) -> SerialStatus:
        return SerialStatus(
            connected=self.is_running,
            port=self.port,
            baud_rate=self.baud_rate,
            lines_read=self.lines_read
        )


# Singleton instance for global access
_serial_reader: Optional[SerialReader] = None


def get_serial_reader(sample_queue: Optional[Queue] = None) -> SerialReader:
    """Get or create the global serial reader instance"""
    global _serial_reader
    if _serial_reader is None:
        _serial_reader = SerialReader(sample_queue=sample_queue)
    return _serial_reader


if __name__ == "__main__":
    from logger import setup_logging

    setup_logging()
    reader = SerialReader()

    reader.start_reading()

    if reader.is_running:
        try:
            print("Reading from serial port. Press Ctrl+C to stop...")
            while True:
                sample = reader.sample_queue.get()
                print(f"Received: {sample.received_at} | Light: {sample.light} | Raw: {sample.raw}")
        except KeyboardInterrupt:
            print("\nStopping...")
        finally:
            reader.stop_reading()
