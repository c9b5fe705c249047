"""Fixtures and utilities for outbound leak corpus tests."""

from pathlib import Path
from typing import Any

import pytest
import yaml

from agenticmail_guard.protection.outbound import OutboundScanner

PAYLOADS_DIR = Path(__file__).parent / "payloads"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file."""
    with open(path) as f:
        return yaml.safe_load(f)


def load_all_payloads() -> list[dict[str, Any]]:
    """Load all payload YAML files from the payloads directory.

    Returns a flat list of all payload entries with category metadata attached.
    """
    all_payloads = []

    for yaml_file in sorted(PAYLOADS_DIR.glob("*.yaml")):
        data = load_yaml_file(yaml_file)
        category = data.get("category", yaml_file.stem)

        for payload in data.get("payloads", []):
            payload["_category"] = category
            payload["_source_file"] = yaml_file.name
            all_payloads.append(payload)

    return all_payloads


def payload_id(payload: dict[str, Any]) -> str:
    """Generate a test ID from a payload entry."""
    return payload.get("id", "unknown")


@pytest.fixture(scope="module")
def outbound_scanner() -> OutboundScanner:
    """Scanner with the default catalog and settings."""
    return OutboundScanner()


def pytest_generate_tests(metafunc: pytest.Metafunc) -> None:
    """Parametrize tests from the payload files."""
    if "payload" in metafunc.fixturenames:
        payloads = load_all_payloads()
        metafunc.parametrize(
            "payload",
            payloads,
            ids=[payload_id(p) for p in payloads],
        )
