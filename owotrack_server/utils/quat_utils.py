"""
Quaternion utility functions for tracker samples.

Trackers send rotations in (x, y, z, w) order. Consumers working in the
(w, x, y, z) convention can convert with the helpers below.
"""

import numpy as np
from scipy.spatial.transform import Rotation as R


IDENTITY_XYZW = (0.0, 0.0, 0.0, 1.0)


def identity_quat():
    """Identity rotation in (x, y, z, w) format."""
    return np.array(IDENTITY_XYZW, dtype=np.float64)


def xyzw_to_wxyz(q):
    """
    Reorder a quaternion from (x, y, z, w) to (w, x, y, z).

    Args:
        q: Quaternion (x, y, z, w)

    Returns:
        Quaternion (w, x, y, z)
    """
    return np.array([q[3], q[0], q[1], q[2]], dtype=np.float64)


def wxyz_to_xyzw(q):
    """
    Reorder a quaternion from (w, x, y, z) to (x, y, z, w).

    Args:
        q: Quaternion (w, x, y, z)

    Returns:
        Quaternion (x, y, z, w)
    """
    return np.array([q[1], q[2], q[3], q[0]], dtype=np.float64)


def quat_normalize(q):
    """
    Normalize quaternion (x, y, z, w format).

    Args:
        q: Quaternion (x, y, z, w)

    Returns:
        Normalized quaternion, identity if q is degenerate or not finite
    """
    q = np.asarray(q, dtype=np.float64)
    norm = np.sqrt(np.sum(q * q))
    if not np.isfinite(norm) or norm < 1e-8:
        return identity_quat()
    return q / norm


def quat_to_rotation(q):
    """
    Build a scipy Rotation from an (x, y, z, w) quaternion.

    Degenerate (near zero, NaN or infinite) quaternions map to the identity rotation
    instead of raising.
    """
    return R.from_quat(quat_normalize(q))
