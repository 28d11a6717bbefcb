#!/usr/bin/env python3
"""
Example: Run the tracker server and print incoming samples.

This script starts the data server and the discovery responder through
TrackingHandler, ticks them at a fixed rate and prints every fresh sample.

Usage:
    python receive_trackers.py --port 6969
    python receive_trackers.py --port 6969 --rate 120 --verbose
"""

import argparse
import os
import sys

from loop_rate_limiters import RateLimiter

# Allow running without installing the package (add project root to path)
_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _root not in sys.path:
    sys.path.insert(0, _root)

from owotrack_server import HandlerStatus, ServerConfig, TrackingHandler, prefixed_sink, print_sink


def main():
    parser = argparse.ArgumentParser(description="Receive tracker data over UDP")

    parser.add_argument(
        "--port",
        type=int,
        default=6969,
        help="UDP data port (default: 6969)",
    )

    parser.add_argument(
        "--max_trackers",
        type=int,
        default=20,
        help="Maximum number of trackers (default: 20)",
    )

    parser.add_argument(
        "--rate",
        type=float,
        default=60.0,
        help="Tick rate in Hz (default: 60)",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Print gyroscope and accelerometer as well",
    )

    args = parser.parse_args()

    config = ServerConfig(data_port=args.port, max_trackers=args.max_trackers)
    handler = TrackingHandler(config, log=prefixed_sink(print_sink("Server")))
    handler.on_status_changed(lambda message, status: print(f"[Main] Status {status:#x}: {message}"))

    status = handler.initialize()
    if status != HandlerStatus.SERVICE_SUCCESS:
        print(f"[Main] Could not start: {HandlerStatus(status).name}")
        return 1

    print(f"[Main] Point trackers at {', '.join(handler.ip_addresses())} port {handler.port}")
    print("[Main] Press Ctrl+C to stop")

    rate = RateLimiter(frequency=args.rate, warn=False)
    try:
        while True:
            handler.update()

            for info in handler.tracker_infos():
                if not handler.data_server.is_data_available(info.id):
                    continue
                sample = handler.get_tracker_sample(info.id)
                q = sample.orientation
                print(f"[Tracker {info.id}] {info.address} "
                      f"rot=({q[0]:6.3f}, {q[1]:6.3f}, {q[2]:6.3f}, {q[3]:6.3f})")
                if args.verbose:
                    g = sample.angular_velocity
                    a = sample.linear_acceleration
                    print(f"  gyro=({g[0]:7.3f}, {g[1]:7.3f}, {g[2]:7.3f}) "
                          f"accel=({a[0]:7.3f}, {a[1]:7.3f}, {a[2]:7.3f})")

            rate.sleep()

    except KeyboardInterrupt:
        print("\n[Main] Stopping...")
    finally:
        handler.shutdown()
        print("[Main] Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
