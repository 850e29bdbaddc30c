"""
Canonical entry point for the airwatch_client package.

Usage:
    airwatch-client watch --environment development
    airwatch-client publish --device-id iot-test-001 --location "Test City" --count 5
"""

import argparse
import json
import logging
import os
import random
import time

from airwatch_core.config.environments import get_settings
from websockets.sync.client import connect

from airwatch_client.devices import DeviceTracker
from airwatch_client.stream import FixedDelay, StreamClient


def setup_logging(config) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def make_frame(device_id: str, location: str, rng: random.Random) -> dict:
    return {
        "type": "iot_reading",
        "deviceId": device_id,
        "location": location,
        "pm25": round(rng.uniform(25, 75), 1),
        "pm10": round(rng.uniform(45, 115), 1),
        "temperature": round(rng.uniform(25, 33), 1),
        "humidity": round(rng.uniform(55, 80), 1),
        "batteryLevel": round(rng.uniform(70, 100), 1),
        "signalStrength": round(rng.uniform(60, 100), 1),
    }


def run_watch(config, url: str, max_attempts) -> None:
    """Print every device update until interrupted."""
    log = logging.getLogger(__name__)
    tracker = DeviceTracker()

    def on_message(message: dict) -> None:
        state = tracker.handle(message)
        if state is not None:
            data = state.data
            log.info(
                "%s @ %s  pm25=%s pm10=%s battery=%s  (%d devices online)",
                state.device_id,
                state.location,
                data.get("pm25"),
                data.get("pm10"),
                data.get("batteryLevel"),
                tracker.online_count(),
            )
        elif message.get("type") in ("connection", "error"):
            log.info("%s: %s", message["type"], message.get("message"))

    client = StreamClient(
        url,
        on_message,
        policy=FixedDelay(config.RECONNECT_DELAY_SEC),
        max_attempts=max_attempts,
    )
    client.start()
    try:
        while client.is_alive():
            client.join(timeout=1.0)
    except KeyboardInterrupt:
        client.stop()
        client.join()


def run_publish(url: str, device_id: str, location: str, count: int, interval: float) -> None:
    """Act as a device: push readings over the realtime channel."""
    log = logging.getLogger(__name__)
    rng = random.Random()

    with connect(url) as ws:
        log.info("Connected: %s", ws.recv())
        for i in range(count):
            ws.send(json.dumps(make_frame(device_id, location, rng)))
            reply = json.loads(ws.recv())
            log.info("Reading %d/%d -> %s", i + 1, count, reply.get("type"))
            if i + 1 < count:
                time.sleep(interval)


def main() -> None:
    """Main entry point for airwatch_client."""
    parser = argparse.ArgumentParser(description="AirWatch Client - realtime stream tools")
    parser.add_argument(
        "--environment",
        choices=["production", "development", "testing"],
        default="development",
        help="Environment to run in",
    )
    parser.add_argument("command", choices=["watch", "publish"], help="Command to run")
    parser.add_argument("--url", help="WebSocket URL (overrides config)")
    parser.add_argument("--max-attempts", type=int, help="Stop after this many connection attempts")
    parser.add_argument("--device-id", default="iot-test-001", help="Device ID to publish as")
    parser.add_argument("--location", default="Test City", help="Location to publish for")
    parser.add_argument("--count", type=int, default=5, help="Number of readings to publish")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between readings")

    args = parser.parse_args()

    # read by get_settings()
    os.environ["AIRWATCH_ENV"] = args.environment
    config = get_settings()
    setup_logging(config)

    url = args.url or config.WS_URL
    if args.command == "watch":
        run_watch(config, url, args.max_attempts)
    else:
        run_publish(url, args.device_id, args.location, args.count, args.interval)


if __name__ == "__main__":
    main()
