from __future__ import annotations

import dataclasses
import logging
import os

import pytest

from nexstar.client import NexStarHandControl
from nexstar.protocol import NexStarCommand, NexStarConstants
from nexstar.serial_prims import NexStarSerialDevice

LOGGER = logging.getLogger("tests.nexstar.serial")


@dataclasses.dataclass(frozen=True)
class NexStarTestConfig:
    port: str
    baud: int
    timeout_s: float

    def __post_init__(self) -> None:
        if not self.port:
            raise ValueError("Serial port is required.")
        if self.baud <= 0:
            raise ValueError("Baud rate must be positive.")
        if self.timeout_s <= 0:
            raise ValueError("Serial timeout must be positive.")


@pytest.fixture(scope="session")
def nexstar_config() -> NexStarTestConfig:
    port = os.environ.get("NEXSTAR_PORT", "")
    if not port:
        LOGGER.info("SKIP NEXSTAR_PORT is not set; skipping serial tests.")
        pytest.skip("NEXSTAR_PORT is not set; skipping serial tests.")
    baud = int(os.environ.get("NEXSTAR_BAUD", str(NexStarConstants.DEFAULT_BAUD)))
    timeout_s = float(os.environ.get("NEXSTAR_TIMEOUT_S", str(NexStarConstants.DEFAULT_TIMEOUT_S)))
    return NexStarTestConfig(port=port, baud=baud, timeout_s=timeout_s)


@pytest.fixture(scope="session")
def hand_control(nexstar_config: NexStarTestConfig):
    LOGGER.info("STEP connect port=%s", nexstar_config.port)
    dev = NexStarSerialDevice(
        nexstar_config.port,
        nexstar_config.baud,
        nexstar_config.timeout_s,
        name="tests.nexstar.serial.device",
    )
    hc = NexStarHandControl(dev, logger=logging.getLogger("tests.nexstar.serial.hc"))
    yield hc
    hc.close()


def test_echo(hand_control: NexStarHandControl) -> None:
    LOGGER.info("STEP echo")
    assert hand_control.echo("x") == b"x#"


def test_version_and_model(hand_control: NexStarHandControl) -> None:
    version = hand_control.get_version()
    model = hand_control.get_model()
    LOGGER.info("STATUS version=%s model=%s", version.to_string(), model.to_string())
    assert version.valid
    assert model.valid


def test_read_positions(hand_control: NexStarHandControl) -> None:
    for command in (NexStarCommand.GET_RA_DEC, NexStarCommand.GET_PRECISE_AZM_ALT):
        reply, pos = hand_control.get_position(command)
        LOGGER.info("STATUS cmd=%s raw=%r pos=%s", command.value, reply, pos.to_string())
        assert 0.0 <= pos.first_turns < 1.0
        assert -180.0 < pos.second_degrees <= 180.0


def test_time_is_readable(hand_control: NexStarHandControl) -> None:
    value = hand_control.get_time()
    LOGGER.info("STATUS %s", value.to_string())
    assert value.valid
    check = hand_control.measure_clock()
    LOGGER.info("STATUS %s", check.to_string())
    assert check.round_trip_s >= 0.0
