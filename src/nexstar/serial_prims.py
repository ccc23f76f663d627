from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

import serial

from .protocol import (
    NexStarConnectionError,
    NexStarConstants,
    NexStarTransportReadShort,
    NexStarTransportWriteShort,
)


class NexStarTransport(Protocol):
    def write(self, data: bytes) -> int:
        raise NotImplementedError

    def read(self, count: int) -> bytes:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class NexStarSerialDevice:
    """Hand-control serial line: 8N1, no flow control, exact-count reads and writes."""

    def __init__(
        self,
        port: str,
        baud: int = NexStarConstants.DEFAULT_BAUD,
        timeout_s: Optional[float] = NexStarConstants.DEFAULT_TIMEOUT_S,
        name: str = "nexstar.serial",
    ) -> None:
        self.log = logging.getLogger(name)
        self.lock = threading.Lock()
        self.port = port
        try:
            self.log.info("Opening serial port %s @ %d baud (timeout=%s)", port, baud, timeout_s)
            self.ser = serial.Serial(
                port=port,
                baudrate=baud,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=timeout_s,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
            )
            self.log.info("Serial port %s opened", port)
        except (serial.SerialException, ValueError) as exc:
            self.log.debug("Failed to open serial port %s", port, exc_info=True)
            raise NexStarConnectionError(f"serial port open {port} failed: {exc}") from exc

    def __repr__(self) -> str:
        return f"NexStarSerialDevice(port={self.port!r})"

    def close(self) -> None:
        with self.lock:
            if self.ser.is_open:
                self.log.info("Closing serial port %s", self.port)
                self.ser.close()

    def write(self, data: bytes) -> int:
        with self.lock:
            self.ser.reset_input_buffer()
            try:
                written = self.ser.write(data) or 0
                self.ser.flush()
            except serial.SerialException as exc:
                raise NexStarTransportWriteShort(len(data), 0) from exc
        if written != len(data):
            raise NexStarTransportWriteShort(len(data), written)
        return written

    def read(self, count: int) -> bytes:
        with self.lock:
            try:
                data = self.ser.read(count)
            except serial.SerialException as exc:
                raise NexStarTransportReadShort(count, b"") from exc
        if len(data) != count:
            self.log.debug("RX TIMEOUT after %ss, got=%r", self.ser.timeout, data)
            raise NexStarTransportReadShort(count, data)
        return data
