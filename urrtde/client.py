"""RTDE client: connection handling and the handshake with the robot."""

from __future__ import annotations

import logging
import os
import queue
import socket
import struct
import threading
import time
from enum import IntEnum
from typing import Any

from .data_package import DataPackage
from .handshake import (
    MAX_INITIALIZE_ATTEMPTS,
    MAX_REQUEST_RETRIES,
    MAX_RTDE_PROTOCOL_VERSION,
    TIMESTAMP,
    UR_RTDE_PORT,
    URE_MAX_FREQUENCY,
    check_input_types,
    check_output_types,
    ensure_timestamp,
    max_frequency_for,
    read_recipe,
    resolve_target_frequency,
)
from .packages import (
    ControlPackagePause,
    ControlPackageStart,
    RequestProtocolVersion,
    RTDEPackage,
    control_package_pause_request,
    control_package_start_request,
    request_protocol_version,
)
from .parser import RTDEParser
from .serialization import HEADER_SIZE, RTDEError, get_package_length
from .setup_packages import (
    ControlPackageSetupInputs,
    ControlPackageSetupOutputs,
    setup_inputs_request,
    setup_outputs_request,
)
from .version import GetUrcontrolVersion, VersionInformation, get_urcontrol_version_request

_log = logging.getLogger(__name__)

_PAUSE_ANSWER_SECONDS = 5
_RETRY_HINT = (
    "Please check the output of the negotiation attempts above to get a hint what could be wrong."
)


class ClientState(IntEnum):
    """Life cycle of an RTDE client."""

    UNINITIALIZED = 0
    INITIALIZING = 1
    INITIALIZED = 2
    RUNNING = 3
    PAUSED = 4


class UrRtdeRobotStatusBits(IntEnum):
    """Bit positions in the ``robot_status_bits`` variable."""

    IS_POWER_ON = 0
    IS_PROGRAM_RUNNING = 1
    IS_TEACH_BUTTON_PRESSED = 2
    IS_POWER_BUTTON_PRESSED = 3


class UrRtdeSafetyStatusBits(IntEnum):
    """Bit positions in the ``safety_status_bits`` variable."""

    IS_NORMAL_MODE = 0
    IS_REDUCED_MODE = 1
    IS_PROTECTIVE_STOPPED = 2
    IS_RECOVERY_MODE = 3
    IS_SAFEGUARD_STOPPED = 4
    IS_SYSTEM_EMERGENCY_STOPPED = 5
    IS_ROBOT_EMERGENCY_STOPPED = 6
    IS_EMERGENCY_STOPPED = 7
    IS_VIOLATION = 8
    IS_FAULT = 9
    IS_STOPPED_DUE_TO_SAFETY = 10


class RTDEClient:
    """Manages an RTDE connection: handshake, starting, pausing and reading data.

    A ``target_frequency`` of zero selects the maximum frequency of the robot.
    """

    def __init__(
        self,
        robot_ip: str,
        output_recipe_file: str | os.PathLike[str],
        input_recipe_file: str | os.PathLike[str],
        target_frequency: float = 0.0,
        *,
        port: int = UR_RTDE_PORT,
        response_timeout: float = 1.0,
        retry_delay: float = 10.0,
        connect_timeout: float = 5.0,
    ) -> None:
        self.robot_ip = robot_ip
        self.port = port
        self._output_recipe = read_recipe(output_recipe_file)
        self._input_recipe = read_recipe(input_recipe_file)
        self._parser = RTDEParser(self._output_recipe)
        self._response_timeout = response_timeout
        self._retry_delay = retry_delay
        self._connect_timeout = connect_timeout

        self._max_frequency = URE_MAX_FREQUENCY
        self._target_frequency = float(target_frequency)
        self._version = VersionInformation()
        self._input_recipe_id: int | None = None
        self._state = ClientState.UNINITIALIZED

        self._socket: socket.socket | None = None
        self._products: queue.Queue[RTDEPackage] | None = None
        self._reader: threading.Thread | None = None

    # -- public state -------------------------------------------------------

    @property
    def state(self) -> ClientState:
        """The current state of the client."""
        return self._state

    @property
    def max_frequency(self) -> float:
        """The highest frequency the robot can publish data packages with."""
        return self._max_frequency

    @property
    def target_frequency(self) -> float:
        """The frequency the robot publishes data packages with."""
        return self._target_frequency

    @property
    def version(self) -> VersionInformation:
        """The controller version reported by the robot."""
        return self._version

    @property
    def output_recipe(self) -> list[str]:
        """The output recipe in use."""
        return list(self._output_recipe)

    @property
    def input_recipe_id(self) -> int | None:
        """The recipe id the robot assigned to the input recipe, once set up."""
        return self._input_recipe_id

    @property
    def local_ip(self) -> str:
        """The local address of the connection, or an empty string if not connected."""
        if self._socket is None:
            return ""
        try:
            return self._socket.getsockname()[0]
        except OSError:
            return ""

    # -- life cycle ---------------------------------------------------------

    def init(self) -> bool:
        """Run the RTDE handshake, retrying a number of times before giving up."""
        if self._state > ClientState.UNINITIALIZED:
            return True

        for _ in range(MAX_INITIALIZE_ATTEMPTS):
            self._setup_communication()
            if self._state == ClientState.INITIALIZED:
                return True
            _log.error(
                "Failed to initialize RTDE client, retrying in %s seconds", self._retry_delay
            )
            time.sleep(self._retry_delay)
        raise RTDEError(
            f"Failed to initialize RTDE client after {MAX_INITIALIZE_ATTEMPTS} attempts"
        )

    def start(self) -> bool:
        """Ask the robot to start sending data packages."""
        if self._state == ClientState.RUNNING:
            return True
        if self._state == ClientState.UNINITIALIZED:
            _log.error("Cannot start an unitialized client, please initialize it first")
            return False
        if self._send_start():
            self._state = ClientState.RUNNING
            return True
        return False

    def pause(self) -> bool:
        """Ask the robot to pause sending data packages."""
        if self._state == ClientState.PAUSED:
            return True
        if self._state != ClientState.RUNNING:
            _log.error("Can't pause the client, as it hasn't been started")
            return False
        if self._send_pause():
            self._state = ClientState.PAUSED
            return True
        return False

    def disconnect(self) -> None:
        """Pause communication if possible and close the connection."""
        if self._socket is not None:
            self._send_pause()
        self._close_connection()
        self._state = ClientState.UNINITIALIZED

    def get_data_package(self, timeout: float) -> DataPackage | None:
        """Return the next data package, or None if none arrives within ``timeout`` seconds."""
        package = self._next_package(timeout)
        if isinstance(package, DataPackage):
            return package
        return None

    def close(self) -> None:
        """Disconnect from the robot."""
        self.disconnect()

    def __enter__(self) -> "RTDEClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # -- handshake ----------------------------------------------------------

    def _setup_communication(self) -> None:
        self._state = ClientState.INITIALIZING
        if self._socket is None and not self._connect():
            self._state = ClientState.UNINITIALIZED
            return

        protocol_version = MAX_RTDE_PROTOCOL_VERSION
        while (
            not self._negotiate_protocol_version(protocol_version)
            and self._state == ClientState.INITIALIZING
        ):
            _log.info(
                "Robot did not accept RTDE protocol version '%d'. Trying lower protocol version",
                protocol_version,
            )
            protocol_version -= 1
            if protocol_version == 0:
                raise RTDEError(
                    "Protocol version for RTDE communication could not be established. "
                    "Robot didn't accept any of the suggested versions."
                )
        if self._state == ClientState.UNINITIALIZED:
            return

        _log.info("Negotiated RTDE protocol version to %d.", protocol_version)
        self._parser.protocol_version = protocol_version

        self._query_urcontrol_version()
        if self._state == ClientState.UNINITIALIZED:
            return

        self._max_frequency = max_frequency_for(self._version)
        self._target_frequency = resolve_target_frequency(
            self._target_frequency, self._max_frequency
        )

        self._setup_outputs(protocol_version)
        if self._state == ClientState.UNINITIALIZED:
            return

        if not self._is_robot_booted():
            self.disconnect()
            return

        self._setup_inputs()
        if self._state == ClientState.UNINITIALIZED:
            return

        self._state = ClientState.INITIALIZED

    def _negotiate_protocol_version(self, protocol_version: int) -> bool:
        self._parser.protocol_version = 1
        if not self._write(request_protocol_version(protocol_version)):
            _log.error("Sending protocol version query to robot failed, disconnecting")
            self.disconnect()
            return False

        for _ in range(MAX_REQUEST_RETRIES):
            package = self._next_package(self._response_timeout)
            if package is None:
                _log.error("failed to get package from rtde interface, disconnecting")
                self.disconnect()
                return False
            if isinstance(package, RequestProtocolVersion):
                return bool(package.accepted)
            _log.warning(
                "Did not receive protocol negotiation answer from robot. "
                "Message received instead:\n%s. Retrying...",
                package,
            )
        raise RTDEError(
            f"Could not negotiate RTDE protocol version after {MAX_REQUEST_RETRIES} tries. "
            + _RETRY_HINT
        )

    def _query_urcontrol_version(self) -> None:
        if not self._write(get_urcontrol_version_request()):
            _log.error("Sending urcontrol version query request to robot failed, disconnecting")
            self.disconnect()
            return

        for _ in range(MAX_REQUEST_RETRIES):
            package = self._next_package(self._response_timeout)
            if package is None:
                _log.error(
                    "No answer to urcontrol version query was received from robot, disconnecting"
                )
                self.disconnect()
                return
            if isinstance(package, GetUrcontrolVersion):
                self._version = package.version_information
                return
            _log.warning(
                "Did not receive protocol negotiation answer from robot. "
                "Message received instead:\n%s. Retrying...",
                package,
            )
        raise RTDEError(
            f"Could not query urcontrol version after {MAX_REQUEST_RETRIES} tries. "
            + _RETRY_HINT
        )

    def _setup_outputs(self, protocol_version: int) -> None:
        _log.info("Setting up RTDE communication with frequency %f", self._target_frequency)
        # The timestamp is needed to find out whether the robot has booted.
        self._output_recipe = ensure_timestamp(self._output_recipe)
        self._parser.recipe = list(self._output_recipe)

        if protocol_version == 2:
            request = setup_outputs_request(self._output_recipe, self._target_frequency)
        else:
            if self._target_frequency != self._max_frequency:
                _log.warning(
                    "It is not possible to set a target frequency when using protocol "
                    "version 1. A frequency equivalent to the maximum frequency will be "
                    "used instead."
                )
            request = setup_outputs_request(self._output_recipe)

        if not self._write(request):
            _log.error("Could not send RTDE output recipe to robot, disconnecting")
            self.disconnect()
            return

        for _ in range(MAX_REQUEST_RETRIES):
            package = self._next_package(self._response_timeout)
            if package is None:
                _log.error("Did not receive confirmation on RTDE output recipe, disconnecting")
                self.disconnect()
                return
            if isinstance(package, ControlPackageSetupOutputs):
                types = check_output_types(self._output_recipe, package.variable_types)
                for name, type_name in zip(self._output_recipe, types):
                    _log.debug("%s confirmed as datatype: %s", name, type_name)
                return
            _log.warning(
                "Did not receive answer to RTDE output setup. "
                "Message received instead:\n%s. Retrying...",
                package,
            )
        raise RTDEError(
            f"Could not setup RTDE outputs after {MAX_REQUEST_RETRIES} tries. " + _RETRY_HINT
        )

    def _setup_inputs(self) -> None:
        if not self._write(setup_inputs_request(self._input_recipe)):
            _log.error("Could not send RTDE input recipe to robot, disconnecting")
            self.disconnect()
            return

        for _ in range(MAX_REQUEST_RETRIES):
            package = self._next_package(self._response_timeout)
            if package is None:
                _log.error("Did not receive confirmation on RTDE input recipe, disconnecting")
                self.disconnect()
                return
            if isinstance(package, ControlPackageSetupInputs):
                types = check_input_types(self._input_recipe, package.variable_types)
                for name, type_name in zip(self._input_recipe, types):
                    _log.debug("%s confirmed as datatype: %s", name, type_name)
                self._input_recipe_id = package.input_recipe_id
                return
            _log.warning(
                "Did not receive answer to RTDE input setup. "
                "Message received instead:\n%s. Retrying...",
                package,
            )
        raise RTDEError(
            f"Could not setup RTDE inputs after {MAX_REQUEST_RETRIES} tries. " + _RETRY_HINT
        )

    def _is_robot_booted(self) -> bool:
        """Read data for about a second unless the controller has been up for 40 seconds.

        The RTDE interface restarts once during boot; connecting before that
        would leave the connection in an invalid state.
        """
        if not self._send_start():
            return False

        timestamp = 0.0
        reading_count = 0
        timeout = int((1 / self._target_frequency) * 1000) * 10 / 1000.0
        while timestamp < 40 and reading_count < self._target_frequency * 2:
            package = self._next_package(timeout)
            if package is None:
                return False
            if isinstance(package, DataPackage):
                try:
                    timestamp = float(package.get_data(TIMESTAMP))
                except KeyError:
                    pass
            reading_count += 1

        return self._send_pause()

    def _send_start(self) -> bool:
        if not self._write(control_package_start_request()):
            _log.error("Sending RTDE start command failed!")
            return False

        package = self._next_package(self._response_timeout)
        if package is None:
            _log.error("Could not get response to RTDE communication start request from robot")
            return False
        if isinstance(package, ControlPackageStart):
            return bool(package.accepted)
        _log.warning(
            "Did not receive answer to RTDE start request. Message received instead:\n%s",
            package,
        )
        return False

    def _send_pause(self) -> bool:
        if not self._write(control_package_pause_request()):
            _log.error("Sending RTDE pause command failed!")
            return False

        deadline = time.monotonic() + _PAUSE_ANSWER_SECONDS
        while time.monotonic() < deadline:
            package = self._next_package(self._response_timeout)
            if package is None:
                _log.error("Could not get response to RTDE communication pause request from robot")
                return False
            if isinstance(package, ControlPackagePause):
                self._state = ClientState.PAUSED
                return bool(package.accepted)
        raise RTDEError(
            f"Could not receive answer to pause RTDE communication after "
            f"{_PAUSE_ANSWER_SECONDS} seconds."
        )

    # -- connection ---------------------------------------------------------

    def _connect(self) -> bool:
        try:
            sock = socket.create_connection(
                (self.robot_ip, self.port), timeout=self._connect_timeout
            )
        except OSError as exc:
            _log.error("Failed to connect to %s:%d: %s", self.robot_ip, self.port, exc)
            return False
        sock.settimeout(None)
        self._socket = sock
        self._products = queue.Queue()
        self._reader = threading.Thread(
            target=self._read_loop, args=(sock, self._products), daemon=True
        )
        self._reader.start()
        return True

    def _close_connection(self) -> None:
        sock, self._socket = self._socket, None
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            sock.close()
        reader, self._reader = self._reader, None
        if reader is not None and reader is not threading.current_thread():
            reader.join(timeout=1.0)
        self._products = None

    def _read_loop(self, sock: socket.socket, products: "queue.Queue[RTDEPackage]") -> None:
        try:
            while True:
                header = _recv_exact(sock, HEADER_SIZE)
                if header is None:
                    return
                size = get_package_length(header)
                body = _recv_exact(sock, max(size - HEADER_SIZE, 0))
                if body is None:
                    return
                try:
                    products.put(self._parser.parse(header + body))
                except (RTDEError, struct.error) as exc:
                    _log.warning("Discarding RTDE package: %s", exc)
        except OSError:
            return

    def _write(self, data: bytes) -> bool:
        sock = self._socket
        if sock is None:
            return False
        try:
            sock.sendall(data)
        except OSError as exc:
            _log.error("Writing to the RTDE connection failed: %s", exc)
            return False
        return True

    def _next_package(self, timeout: float) -> RTDEPackage | None:
        products = self._products
        if products is None:
            return None
        try:
            return products.get(timeout=timeout)
        except queue.Empty:
            return None


def _recv_exact(sock: socket.socket, count: int) -> bytes | None:
    """Receive exactly ``count`` bytes, or None if the connection ends first."""
    chunks = bytearray()
    while len(chunks) < count:
        chunk = sock.recv(count - len(chunks))
        if not chunk:
            return None
        chunks += chunk
    return bytes(chunks)