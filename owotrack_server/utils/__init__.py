"""
Utility functions shared by the tracker servers.

This module provides:
    - log_sink: the (message, severity) logging capability and its adapters
    - quat_utils: quaternion order conversions for tracker samples
"""

from .log_sink import LogSink, Severity, logging_sink, prefixed_sink, print_sink
from .quat_utils import identity_quat, quat_normalize, quat_to_rotation, wxyz_to_xyzw, xyzw_to_wxyz

__all__ = [
    "LogSink",
    "Severity",
    "logging_sink",
    "prefixed_sink",
    "print_sink",
    "identity_quat",
    "quat_normalize",
    "quat_to_rotation",
    "wxyz_to_xyzw",
    "xyzw_to_wxyz",
]
