"""
Tracker slots - fixed-capacity per-device state.

Each device that streams data gets a slot with a stable integer id and the
network address it sends from. Ids are handed out sequentially and never
reused; once the store is full, new addresses are rejected.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from ..config import MAX_TRACKERS
from ..utils.quat_utils import identity_quat, quat_to_rotation, xyzw_to_wxyz

# Packet ids below this are always accepted so a device that restarted its
# own counter can resume without the server resetting the slot
SEQUENCE_RESTART_WINDOW = 5

Address = Tuple[str, int]


def normalize_address(address) -> Address:
    """Reduce a socket address to its (host, port) identity."""
    return (address[0], int(address[1]))


def _frozen(array: np.ndarray) -> np.ndarray:
    out = np.array(array, dtype=np.float64, copy=True)
    out.setflags(write=False)
    return out


@dataclass(frozen=True)
class TrackerSample:
    """
    Read-only snapshot of one tracker's sensor buffers.

    Attributes:
        tracker_id: Slot id
        orientation: Rotation quaternion (x, y, z, w)
        angular_velocity: Gyroscope rate in rad/s (x, y, z)
        linear_acceleration: Accelerometer in m/s^2 (x, y, z)
        connected: Liveness at the time of the snapshot
        last_contact_time: Wall-clock time of the last accepted datagram
    """

    tracker_id: int
    orientation: np.ndarray
    angular_velocity: np.ndarray
    linear_acceleration: np.ndarray
    connected: bool
    last_contact_time: float

    def orientation_wxyz(self) -> np.ndarray:
        """Orientation reordered to (w, x, y, z)."""
        return xyzw_to_wxyz(self.orientation)

    def as_rotation(self):
        """Orientation as a scipy Rotation."""
        return quat_to_rotation(self.orientation)


class TrackerSlot:
    """State for a single tracker device."""

    def __init__(self, tracker_id: int, client_address: Address, now: float):
        self._id = tracker_id
        self._client_address = client_address
        self.last_sequence = 0
        self.orientation = identity_quat()
        self.angular_velocity = np.zeros(3, dtype=np.float64)
        self.linear_acceleration = np.zeros(3, dtype=np.float64)
        self.has_fresh_data = False
        self.last_contact_time = now
        self.connected = True

    @property
    def id(self) -> int:
        return self._id

    @property
    def client_address(self) -> Address:
        return self._client_address

    def receive_packet_id(self, new_id: int) -> bool:
        """
        Sequencing guard for an incoming packet id.

        Accepts strictly newer ids, and any id inside the restart window.
        Accepted ids become the new high-water mark.
        """
        if new_id > self.last_sequence or new_id < SEQUENCE_RESTART_WINDOW:
            self.last_sequence = new_id
            return True
        return False

    def consume_fresh_data(self) -> bool:
        was_available = self.has_fresh_data
        self.has_fresh_data = False
        return was_available

    def snapshot(self) -> TrackerSample:
        return TrackerSample(
            tracker_id=self._id,
            orientation=_frozen(self.orientation),
            angular_velocity=_frozen(self.angular_velocity),
            linear_acceleration=_frozen(self.linear_acceleration),
            connected=self.connected,
            last_contact_time=self.last_contact_time,
        )

    def __repr__(self):
        return (f"TrackerSlot(id={self._id}, address={self._client_address}, "
                f"connected={self.connected}, last_sequence={self.last_sequence})")


class TrackerSlotStore:
    """
    Append-only table of tracker slots with O(1) lookup by client address.

    Example usage:
        store = TrackerSlotStore(capacity=20)
        slot = store.get_or_assign(("192.168.1.40", 51234), now=time.time())
        if slot is None:
            pass  # full, drop the packet
    """

    def __init__(self, capacity: int = MAX_TRACKERS):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive: {capacity}")
        self.capacity = capacity
        self._slots: List[TrackerSlot] = []
        self._by_address: Dict[Address, int] = {}

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[TrackerSlot]:
        return iter(self._slots)

    @property
    def is_full(self) -> bool:
        return len(self._slots) >= self.capacity

    def get(self, tracker_id) -> Optional[TrackerSlot]:
        """Slot for an id, or None if the id is out of range or unassigned."""
        if not isinstance(tracker_id, (int, np.integer)) or isinstance(tracker_id, bool):
            return None
        if tracker_id < 0 or tracker_id >= len(self._slots):
            return None
        return self._slots[tracker_id]

    def find(self, address) -> Optional[TrackerSlot]:
        index = self._by_address.get(normalize_address(address))
        if index is None:
            return None
        return self._slots[index]

    def assign(self, address, now: float) -> Optional[TrackerSlot]:
        """
        Allocate the next sequential id for a new address.

        Returns:
            The new slot, or None when the store is full
        """
        address = normalize_address(address)
        if address in self._by_address:
            raise ValueError(f"address already assigned: {address}")
        if self.is_full:
            return None
        slot = TrackerSlot(len(self._slots), address, now)
        self._slots.append(slot)
        self._by_address[address] = slot.id
        return slot

    def get_or_assign(self, address, now: float) -> Optional[TrackerSlot]:
        slot = self.find(address)
        if slot is not None:
            return slot
        return self.assign(address, now)
