"""
NetworkedDeviceQuatServer - datagram dispatch and per-tracker state.

Decodes raw datagrams into tracker messages and applies them to the slot
owned by the sending address. Subclasses supply the transport by
implementing ``_send_to``.
"""

import time
from abc import abstractmethod
from typing import Callable, List, Optional

from ..config import MAX_TRACKERS
from ..protocol.messages import (
    HANDSHAKE_REPLY,
    MSG_ACCELEROMETER,
    MSG_GYRO,
    MSG_ROTATION,
    parse_datagram,
)
from ..utils.log_sink import LogSink, Severity, print_sink
from .base import DeviceQuatServer
from .slots import TrackerSample, TrackerSlot, TrackerSlotStore

# (tracker_id, connected)
TrackerListener = Callable[[int, bool], None]

# Buffer each sensor message writes into
_SAMPLE_TARGETS = {
    MSG_ROTATION: "orientation",
    MSG_GYRO: "angular_velocity",
    MSG_ACCELEROMETER: "linear_acceleration",
}


class NetworkedDeviceQuatServer(DeviceQuatServer):
    """
    Shared logic for servers whose trackers are identified by network address.

    A datagram goes through these steps:
    1. Handshakes are answered straight away and never allocate a slot
    2. Malformed or unknown datagrams are dropped
    3. The source address is matched to a slot, or a new slot is assigned
    4. The sequencing guard drops stale and duplicate packets
    5. Accepted packets refresh liveness and update the sensor buffers
    """

    def __init__(
        self,
        max_trackers: int = MAX_TRACKERS,
        log: Optional[LogSink] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            max_trackers: Slot capacity
            log: Sink for (message, severity) notifications
            clock: Wall-clock source in seconds
        """
        self.max_trackers = max_trackers
        self.log = log or print_sink(type(self).__name__)
        self.clock = clock
        self.slots = TrackerSlotStore(max_trackers)
        self._listeners: List[TrackerListener] = []

    @abstractmethod
    def _send_to(self, address, payload: bytes) -> None:
        """Send a datagram to a client address."""

    # ── Notifications ─────────────────────────────────────────────

    def add_listener(self, callback: TrackerListener) -> None:
        """Register a callback for tracker connect / disconnect transitions."""
        self._listeners.append(callback)

    def _notify(self, tracker_id: int, connected: bool) -> None:
        for callback in self._listeners:
            try:
                callback(tracker_id, connected)
            except Exception as e:
                self.log(f"Tracker listener failed: {e!r}", Severity.ERROR)

    # ── Dispatch ──────────────────────────────────────────────────

    def handle_datagram(self, data: bytes, address, now: Optional[float] = None) -> bool:
        """
        Apply one inbound datagram.

        Args:
            data: Datagram payload
            address: Source (host, port)
            now: Receive time, defaults to the server clock

        Returns:
            True if the datagram changed tracker state
        """
        try:
            msg = parse_datagram(data)
        except ValueError:
            return False

        if msg.is_handshake:
            # The device gets a slot on its first data packet
            self._send_to(address, HANDSHAKE_REPLY)
            return False

        if now is None:
            now = self.clock()

        slot = self._resolve_slot(address, now)
        if slot is None:
            return False

        if not slot.receive_packet_id(msg.sequence):
            return False

        slot.last_contact_time = now
        if not slot.connected:
            slot.connected = True
            self.log(f"Tracker device {slot.id} reconnected", Severity.INFO)
            self._notify(slot.id, True)

        target = _SAMPLE_TARGETS.get(msg.msg_type)
        if target is not None:
            getattr(slot, target)[:] = msg.samples
            slot.has_fresh_data = True
        return True

    def _resolve_slot(self, address, now: float) -> Optional[TrackerSlot]:
        slot = self.slots.find(address)
        if slot is not None:
            return slot
        slot = self.slots.assign(address, now)
        if slot is None:
            return None
        self.log(f"New tracker device connected! Tracker ID: {slot.id}", Severity.INFO)
        self._notify(slot.id, True)
        return slot

    # ── Multi-tracker interface ───────────────────────────────────

    def get_active_tracker_count(self) -> int:
        return len(self.slots)

    def is_tracker_connected(self, tracker_id: int) -> bool:
        slot = self.slots.get(tracker_id)
        return slot is not None and slot.connected

    def is_connection_alive(self, tracker_id: int) -> bool:
        return self.is_tracker_connected(tracker_id)

    def is_data_available(self, tracker_id: int) -> bool:
        slot = self.slots.get(tracker_id)
        if slot is None:
            return False
        return slot.consume_fresh_data()

    def get_tracker_sample(self, tracker_id: int) -> Optional[TrackerSample]:
        """Snapshot of every buffer of a tracker, or None for an invalid id."""
        slot = self.slots.get(tracker_id)
        if slot is None:
            return None
        return slot.snapshot()

    def get_rotation_quaternion(self, tracker_id: int):
        sample = self.get_tracker_sample(tracker_id)
        return None if sample is None else sample.orientation

    def get_gyroscope(self, tracker_id: int):
        sample = self.get_tracker_sample(tracker_id)
        return None if sample is None else sample.angular_velocity

    def get_accel(self, tracker_id: int):
        sample = self.get_tracker_sample(tracker_id)
        return None if sample is None else sample.linear_acceleration
