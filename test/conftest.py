from pathlib import Path
from typing import Any, Callable

import pytest
import yaml


@pytest.fixture
def driver_config_data() -> dict[str, Any]:
    """Driver document with one device per protocol family"""
    return {
        "driver": "multi-protocol",
        "devices": [
            {
                "name": "boiler-1",
                "version": "1.2",
                "delta": "thing/boiler-1/delta",
                "report": {"topic": "thing/boiler-1/report", "qos": 1},
                "getResponse": {"topic": "thing/boiler-1/get/response"},
                "access": {
                    "id": 1,
                    "interval": "5s",
                    "tcp": {"address": "10.0.0.5", "port": 502},
                },
                "properties": [
                    {
                        "name": "temperature",
                        "type": "float32",
                        "mode": "ro",
                        "visitor": {
                            "function": 3,
                            "address": "0",
                            "quantity": 2,
                            "type": "float32",
                        },
                    },
                    {
                        "name": "setpoint",
                        "mode": "rw",
                        "visitor": {
                            "function": 3,
                            "address": "10",
                            "quantity": 1,
                            "type": "int16",
                            "scale": 0.1,
                        },
                    },
                ],
            },
            {
                "name": "line-plc",
                "access": {
                    "endpoint": "opc.tcp://10.0.0.8:4840",
                    "interval": "2s",
                    "security": {"policy": "Basic256Sha256", "mode": "SignAndEncrypt"},
                    "auth": {"username": "operator", "password": "secret"},
                    "certificate": {"certFile": "/etc/certs/client.pem", "keyFile": "/etc/certs/client.key"},
                },
                "properties": [
                    {"name": "speed", "visitor": {"nodeId": "ns=2;s=Line1.Speed", "type": "float64"}},
                ],
            },
            {
                "name": "vendor-box",
                "access": "vendor-gateway://plant-a",
                "properties": [{"name": "status", "visitor": "point-17"}],
            },
        ],
    }


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[Any, str], Path]:
    """Write a document to a YAML file under tmp_path and return its path"""

    def _write(data: Any, filename: str = "driver.yml") -> Path:
        path = tmp_path / filename
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    return _write
