"""
MQTT bridge: sensor readings in, AQI-enriched readings out.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import paho.mqtt.client as mqtt

from aqi import aqi_category
from aqi_readings import AQI_FIELD, InvalidReading, encode, process_payload

logger = logging.getLogger(__name__)


class AQIBridge:
    """
    Subscribes to `input_topic`, computes the AQI for every reading and
    republishes the enriched payload on `output_topic`.

    Subscriptions are (re)made in on_connect so they survive reconnects.
    """

    def __init__(
        self,
        client: mqtt.Client,
        *,
        input_topic: str,
        output_topic: str,
        qos: int = 1,
    ) -> None:
        self.client = client
        self.input_topic = input_topic
        self.output_topic = output_topic
        self.qos = qos

        client.on_connect = self.on_connect
        client.on_disconnect = self.on_disconnect
        client.on_message = self.on_message

    def on_connect(self, client: mqtt.Client, userdata: Any, flags: Any, reason_code: Any, properties: Any = None) -> None:
        if reason_code.is_failure:
            logger.error("Connection refused by broker: %s", reason_code)
            return
        logger.info("Connected to MQTT broker")
        client.subscribe(self.input_topic, qos=self.qos)
        logger.info("Subscribed to topic: %s", self.input_topic)
        logger.info("Publishing AQI data to topic: %s", self.output_topic)

    def on_disconnect(self, client: mqtt.Client, userdata: Any, flags: Any, reason_code: Any, properties: Any = None) -> None:
        if reason_code.is_failure:
            logger.warning("Connection lost: %s", reason_code)
        else:
            logger.info("Disconnected from MQTT broker")

    def on_message(self, client: mqtt.Client, userdata: Any, msg: mqtt.MQTTMessage) -> None:
        self.handle_message(msg.topic, msg.payload)

    def handle_message(self, topic: str, payload: bytes) -> Optional[int]:
        """
        Process one raw message. Returns the published AQI, or None when the
        message was dropped or could not be queued.
        """
        logger.debug("Processing message from topic: %s", topic)
        try:
            enriched = process_payload(payload)
        except InvalidReading as e:
            logger.warning("Dropping message from %s: %s", topic, e)
            return None

        aqi = enriched[AQI_FIELD]
        info = self.client.publish(self.output_topic, encode(enriched), qos=self.qos)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.error("Error publishing to topic %s: %s", self.output_topic, mqtt.error_string(info.rc))
            return None

        logger.info("Published AQI=%d (%s) to topic %s", aqi, aqi_category(aqi), self.output_topic)
        return aqi

    def stop(self) -> None:
        self.client.unsubscribe(self.input_topic)
        self.client.disconnect()
