"""
Simulated AirGradient outdoor monitor.

Publishes AirGradient-style JSON readings to an MQTT topic so the AQI daemon
can be exercised without real hardware. Values have:
- Slow mean-reverting drift
- Gaussian noise
- Occasional PM spikes (smoke, dust) with exponential decay
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
import time
from typing import Any, Dict, List, Optional

import paho.mqtt.client as mqtt


class SensorSimulator:
    """
    Stateful simulator that produces plausible outdoor PM readings.
    """

    def __init__(
        self,
        *,
        seed: Optional[int] = None,
        serial_no: str = "d83bda1d7660",
        base_pm25_ug_m3: float = 8.0,
        base_temperature_c: float = 20.0,
        base_humidity_rh: float = 55.0,
        base_co2_ppm: float = 420.0,
    ) -> None:
        self._rng = random.Random(seed)
        self.serial_no = serial_no

        self._base_pm25 = base_pm25_ug_m3
        self._pm25 = base_pm25_ug_m3
        self._coarse_ratio = 1.3
        self._temp = base_temperature_c
        self._rh = base_humidity_rh
        self._co2 = base_co2_ppm
        self._spike = 0.0
        self._boot = 0

    def _clamp(self, x: float, lo: float, hi: float) -> float:
        return max(lo, min(hi, x))

    def next_reading(self) -> Dict[str, Any]:
        """
        Produce the next reading as a JSON-ready dict.
        """
        self._boot += 1

        self._pm25 += self._rng.gauss(0.0, 0.3)
        self._pm25 += 0.02 * (self._base_pm25 - self._pm25)

        if self._rng.random() < 0.01:
            self._spike += self._rng.uniform(20.0, 150.0)
        self._spike *= 0.9

        pm25 = self._clamp(self._pm25 + self._spike, 0.0, 600.0)

        # PM10 always carries at least the fine fraction
        self._coarse_ratio = self._clamp(self._coarse_ratio + self._rng.gauss(0.0, 0.02), 1.05, 2.5)
        pm10 = self._clamp(pm25 * self._coarse_ratio, pm25, 700.0)
        pm01 = pm25 * 0.65

        self._temp = self._clamp(self._temp + self._rng.gauss(0.0, 0.05), -20.0, 45.0)
        self._rh = self._clamp(self._rh + self._rng.gauss(0.0, 0.2), 5.0, 100.0)
        self._co2 = self._clamp(self._co2 + self._rng.gauss(0.0, 2.0), 400.0, 2000.0)

        return {
            "pm01": round(pm01),
            "pm02": round(pm25),
            "pm10": round(pm10),
            "pm01Standard": round(pm01, 2),
            "pm02Standard": round(pm25, 2),
            "pm10Standard": round(pm10, 2),
            "pm003Count": round(pm25 * 40.0, 2),
            "pm005Count": round(pm25 * 32.0, 2),
            "pm01Count": round(pm25 * 5.0, 2),
            "pm02Count": round(pm25 * 0.3, 2),
            "atmp": round(self._temp, 2),
            "rhum": round(self._rh, 2),
            "rco2": round(self._co2),
            "tvocIndex": self._rng.randint(40, 120),
            "noxIndex": self._rng.randint(1, 5),
            "boot": self._boot,
            "bootCount": self._boot,
            "wifi": self._rng.randint(-80, -50),
            "serialno": self.serial_no,
            "firmware": "3.2.0",
            "model": "O-1PST",
        }


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Publish simulated AirGradient readings")
    p.add_argument("--broker", default="localhost", help="MQTT broker host")
    p.add_argument("--port", type=int, default=1883, help="MQTT broker port")
    p.add_argument("--topic", default=None, help="Topic to publish to (default airgradient/readings/<serial>)")
    p.add_argument("--serial", default="d83bda1d7660", help="Simulated device serial number")
    p.add_argument("--interval", type=float, default=5.0, help="Publish interval (seconds)")
    p.add_argument("--count", type=int, default=0, help="Number of readings to publish (0 = forever)")
    p.add_argument("--seed", type=int, default=42, help="Random seed for simulator")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )
    topic = args.topic or f"airgradient/readings/{args.serial}"

    sim = SensorSimulator(seed=args.seed, serial_no=args.serial)
    client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=f"aqi-simulator-{args.serial}")
    try:
        client.connect(args.broker, args.port, keepalive=60)
    except OSError as e:
        logging.error("Failed to connect to MQTT broker %s:%d: %s", args.broker, args.port, e)
        return 1
    client.loop_start()

    logging.info("Publishing readings every %.1fs -> %s", args.interval, topic)
    produced = 0
    try:
        while args.count <= 0 or produced < args.count:
            reading = sim.next_reading()
            produced += 1
            info = client.publish(topic, json.dumps(reading), qos=1)
            if info.rc != mqtt.MQTT_ERR_SUCCESS:
                logging.error("Error publishing reading #%d to %s: %s", produced, topic, mqtt.error_string(info.rc))
            else:
                info.wait_for_publish()
                logging.info(
                    "PM2.5=%.2f PM10=%.2f ug/m3 (#%d)",
                    reading["pm02Standard"],
                    reading["pm10Standard"],
                    produced,
                )
            if args.count <= 0 or produced < args.count:
                time.sleep(max(0.1, float(args.interval)))
    except KeyboardInterrupt:
        logging.info("Stopped.")
    finally:
        client.disconnect()
        client.loop_stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
