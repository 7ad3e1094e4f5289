"""
AQI MQTT daemon.

Subscribes to sensor readings, computes the AQI from PM2.5/PM10 and
republishes each reading with an `aqi` field. Defaults can be set through
AQI_MQTT_* environment variables or a local .env file.
"""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv
import paho.mqtt.client as mqtt

from aqi_bridge import AQIBridge


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"AQI_MQTT_{name}", default)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    load_dotenv(find_dotenv(usecwd=True))
    p = argparse.ArgumentParser(description="Compute AQI for MQTT sensor readings")
    p.add_argument("--broker", default=_env("BROKER", "localhost"), help="MQTT broker host")
    p.add_argument("--port", type=int, default=int(_env("PORT", "1883")), help="MQTT broker port")
    p.add_argument("--input-topic", default=_env("INPUT_TOPIC", "airgradient/readings/#"), help="Topic to read sensor data from")
    p.add_argument("--output-topic", default=_env("OUTPUT_TOPIC", "aqi"), help="Topic to publish enriched readings to")
    p.add_argument("--client-id", default=_env("CLIENT_ID", "aqi-calculator"), help="MQTT client id")
    p.add_argument("--qos", type=int, choices=(0, 1, 2), default=int(_env("QOS", "1")), help="QoS for subscribe and publish")
    p.add_argument("--keepalive", type=int, default=60, help="Keepalive interval (seconds)")
    p.add_argument("--username", default=_env("USERNAME"), help="Broker username")
    p.add_argument("--password", default=_env("PASSWORD"), help="Broker password")
    p.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=_env("LOG_LEVEL", "INFO"), help="Logging level")
    args = p.parse_args(argv)
    # argparse does not check defaults against choices
    args.log_level = args.log_level.upper()
    if args.log_level not in LOG_LEVELS:
        p.error(f"invalid log level: {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})")
    return args


def build_client(args: argparse.Namespace) -> mqtt.Client:
    client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=args.client_id)
    if args.username:
        client.username_pw_set(args.username, args.password)
    client.reconnect_delay_set(min_delay=1, max_delay=30)
    return client


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    client = build_client(args)
    bridge = AQIBridge(
        client,
        input_topic=args.input_topic,
        output_topic=args.output_topic,
        qos=args.qos,
    )

    logging.info("Connecting to MQTT broker at %s:%d", args.broker, args.port)
    try:
        client.connect(args.broker, args.port, keepalive=args.keepalive)
    except OSError as e:
        logging.error("Failed to connect to MQTT broker %s:%d: %s", args.broker, args.port, e)
        return 1

    def _shutdown(signum, frame):
        logging.info("Shutting down...")
        bridge.stop()

    signal.signal(signal.SIGTERM, _shutdown)
    signal.signal(signal.SIGINT, _shutdown)

    client.loop_forever()
    logging.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
