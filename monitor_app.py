"""Command-line access to the cloud side of the humidor monitor.

Usage::

    humidor-monitor sign-in --email me@example.com      # prompts for the password
    humidor-monitor sensors
    humidor-monitor reading 12345.678
    humidor-monitor history 12345.678 --range week
    humidor-monitor sign-out
"""

from __future__ import annotations

import argparse
import getpass
import json
import logging
import os

from humidor.config import load_config
from humidor.domain import TimeRange
from humidor.errors import InvalidToken, MonitorError
from humidor.hardware.adapters.sensors import CloudSensor
from humidor.services.container import MonitorContainer
from infrastructure.logging import configure_logging

logger = logging.getLogger(__name__)

_RANGES = {
    "day": TimeRange.DAY,
    "week": TimeRange.WEEK,
    "month": TimeRange.MONTH,
    "year": TimeRange.YEAR,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="humidor-monitor", description="Humidor environmental monitor")
    sub = parser.add_subparsers(dest="command", required=True)

    sign_in = sub.add_parser("sign-in", help="Sign in to the cloud sensor API")
    sign_in.add_argument("--email", default=os.getenv("HUMIDOR_EMAIL"), help="Account email")
    sign_in.add_argument(
        "--password",
        default=os.getenv("HUMIDOR_PASSWORD"),
        help="Account password (prompted when omitted)",
    )

    sub.add_parser("sign-out", help="Forget the stored access token")
    sub.add_parser("sensors", help="List sensors on the account")

    reading = sub.add_parser("reading", help="Show the latest reading of a sensor")
    reading.add_argument("sensor_id")

    history = sub.add_parser("history", help="Show stability and range statistics over a time range")
    history.add_argument("sensor_id")
    history.add_argument("--range", dest="time_range", choices=sorted(_RANGES), default="day")
    return parser


def _print(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _run(args: argparse.Namespace, container: MonitorContainer) -> int:
    session = container.session
    monitoring = container.monitoring

    if args.command == "sign-in":
        email = args.email or input("Email: ")
        password = args.password or getpass.getpass("Password: ")
        session.authenticate(email, password)
        print("Signed in.")
        return 0

    if args.command == "sign-out":
        session.sign_out()
        print("Signed out.")
        return 0

    if args.command == "sensors":
        _print([descriptor.to_dict() for descriptor in container.cloud_backend.list_sensors()])
        return 0

    # reading and history need the sensor registered with the monitoring service
    descriptor = next(
        (d for d in container.cloud_backend.list_sensors() if d.id == args.sensor_id),
        None,
    )
    if descriptor is None:
        print(f"Unknown sensor: {args.sensor_id}")
        return 1
    monitoring.register_sensor(CloudSensor(descriptor, container.cloud_backend))

    if args.command == "reading":
        reading = monitoring.latest_reading(args.sensor_id)
        _print(
            {
                "reading": reading.to_dict(),
                "status": {str(m): str(s) for m, s in monitoring.status(args.sensor_id).items()},
                "alerts": [a.to_dict() for a in container.alert_engine.open_alerts(args.sensor_id)],
            }
        )
        return 0

    time_range = _RANGES[args.time_range]
    readings = monitoring.refresh(args.sensor_id, time_range)
    _print(
        {
            "range": time_range.value,
            "count": len(readings),
            "stability": monitoring.stability(args.sensor_id).to_dict(),
            "summary": {str(m): s.to_dict() for m, s in monitoring.summary(args.sensor_id).items()},
        }
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    config = load_config()
    configure_logging(config)
    container = MonitorContainer.build(config)

    try:
        return _run(args, container)
    except InvalidToken as e:
        print(f"{e.message} Run 'humidor-monitor sign-in' first.")
        return 1
    except MonitorError as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}")
        return 1
    finally:
        container.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
