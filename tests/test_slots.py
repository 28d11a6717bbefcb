"""Tests for tracker slots: sequencing guard, assignment, snapshots."""

import numpy as np
import pytest
from scipy.spatial.transform import Rotation as R

from owotrack_server.device_server import SEQUENCE_RESTART_WINDOW, TrackerSlot, TrackerSlotStore


def _slot(last_sequence=0):
    slot = TrackerSlot(0, ("10.0.0.2", 5000), now=0.0)
    slot.last_sequence = last_sequence
    return slot


# ── Sequencing guard ──────────────────────────────────────────────


class TestSequencingGuard:
    @pytest.mark.parametrize("old, new", [(0, 1), (10, 11), (10, 1000), (2**63, 2**64 - 1)])
    def test_newer_accepted(self, old, new):
        slot = _slot(old)
        assert slot.receive_packet_id(new)
        assert slot.last_sequence == new

    @pytest.mark.parametrize("old, new", [(10, 10), (10, 9), (100, 5), (2**64 - 1, 2**63)])
    def test_stale_or_duplicate_rejected(self, old, new):
        slot = _slot(old)
        assert not slot.receive_packet_id(new)
        assert slot.last_sequence == old

    @pytest.mark.parametrize("new", range(SEQUENCE_RESTART_WINDOW))
    def test_restart_window_always_accepted(self, new):
        slot = _slot(1000)
        assert slot.receive_packet_id(new)
        assert slot.last_sequence == new

    def test_window_boundary_is_strict(self):
        slot = _slot(1000)
        assert not slot.receive_packet_id(5)

    def test_restart_then_resume(self):
        slot = _slot(500)
        assert slot.receive_packet_id(0)
        assert slot.receive_packet_id(1)
        assert slot.receive_packet_id(6)
        assert not slot.receive_packet_id(6)


# ── Slot state ────────────────────────────────────────────────────


class TestTrackerSlot:
    def test_defaults(self):
        slot = _slot()
        np.testing.assert_array_equal(slot.orientation, [0.0, 0.0, 0.0, 1.0])
        np.testing.assert_array_equal(slot.angular_velocity, [0.0, 0.0, 0.0])
        np.testing.assert_array_equal(slot.linear_acceleration, [0.0, 0.0, 0.0])
        assert slot.connected
        assert not slot.has_fresh_data

    def test_identity_is_read_only(self):
        slot = _slot()
        with pytest.raises(AttributeError):
            slot.id = 3
        with pytest.raises(AttributeError):
            slot.client_address = ("1.2.3.4", 1)

    def test_fresh_data_consumed_once(self):
        slot = _slot()
        slot.has_fresh_data = True
        assert slot.consume_fresh_data()
        assert not slot.consume_fresh_data()

    def test_snapshot_is_detached_and_read_only(self):
        slot = _slot()
        sample = slot.snapshot()
        slot.orientation[:] = (1.0, 0.0, 0.0, 0.0)
        np.testing.assert_array_equal(sample.orientation, [0.0, 0.0, 0.0, 1.0])
        with pytest.raises(ValueError):
            sample.orientation[0] = 5.0

    def test_snapshot_conversions(self):
        slot = _slot()
        slot.orientation[:] = R.from_euler("z", 90, degrees=True).as_quat()
        sample = slot.snapshot()
        np.testing.assert_allclose(sample.orientation_wxyz(), [np.sqrt(0.5), 0.0, 0.0, np.sqrt(0.5)])
        np.testing.assert_allclose(sample.as_rotation().apply([1.0, 0.0, 0.0]), [0.0, 1.0, 0.0], atol=1e-12)


# ── Slot store ────────────────────────────────────────────────────


class TestTrackerSlotStore:
    def test_sequential_ids(self):
        store = TrackerSlotStore(capacity=3)
        ids = [store.assign(("10.0.0.1", 6000 + i), now=0.0).id for i in range(3)]
        assert ids == [0, 1, 2]
        assert len(store) == 3

    def test_same_address_same_slot(self):
        store = TrackerSlotStore(capacity=3)
        first = store.get_or_assign(("10.0.0.1", 6000), now=0.0)
        for _ in range(5):
            assert store.get_or_assign(("10.0.0.1", 6000), now=1.0) is first
        assert len(store) == 1

    def test_port_distinguishes_clients(self):
        store = TrackerSlotStore(capacity=3)
        a = store.get_or_assign(("10.0.0.1", 6000), now=0.0)
        b = store.get_or_assign(("10.0.0.1", 6001), now=0.0)
        assert a.id != b.id

    def test_capacity_rejects_without_eviction(self):
        store = TrackerSlotStore(capacity=2)
        a = store.assign(("10.0.0.1", 1), now=0.0)
        b = store.assign(("10.0.0.2", 1), now=0.0)
        assert store.is_full
        assert store.get_or_assign(("10.0.0.3", 1), now=0.0) is None
        assert list(store) == [a, b]

    def test_duplicate_assign_raises(self):
        store = TrackerSlotStore()
        store.assign(("10.0.0.1", 1), now=0.0)
        with pytest.raises(ValueError):
            store.assign(("10.0.0.1", 1), now=0.0)

    def test_address_normalized(self):
        store = TrackerSlotStore()
        slot = store.assign(("fe80::1", 7000, 0, 3), now=0.0)
        assert slot.client_address == ("fe80::1", 7000)
        assert store.find(("fe80::1", 7000, 0, 0)) is slot

    @pytest.mark.parametrize("bad_id", [-1, 1, 20, 3.0, None, True])
    def test_get_invalid_ids(self, bad_id):
        store = TrackerSlotStore()
        store.assign(("10.0.0.1", 1), now=0.0)
        assert store.get(bad_id) is None

    def test_zero_capacity_rejected(self):
        with pytest.raises(ValueError):
            TrackerSlotStore(capacity=0)
