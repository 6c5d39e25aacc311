"""
Behave environment configuration for Route53 Sync integration tests.
"""

import copy
import logging
import shutil
from pathlib import Path

import yaml

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

REMOTE_ZONES = [
    {
        "id": "Z1EXAMPLE",
        "name": "example.com.",
        "comment": "public zone",
        "records": [
            {
                "Name": "example.com.",
                "Type": "SOA",
                "TTL": 900,
                "ResourceRecords": [
                    {"Value": "ns-1.awsdns-01.org. awsdns-hostmaster.amazon.com. 1 7200 900 1209600 86400"}
                ],
            },
            {
                "Name": "example.com.",
                "Type": "NS",
                "TTL": 172800,
                "ResourceRecords": [{"Value": "ns-1.awsdns-01.org."}],
            },
            {
                "Name": "www.example.com.",
                "Type": "A",
                "TTL": 300,
                "ResourceRecords": [{"Value": "192.0.2.10"}],
            },
        ],
    },
    {
        "id": "Z2INTERNAL",
        "name": "internal.example.",
        "private": True,
        "records": [
            {
                "Name": "db.internal.example.",
                "Type": "CNAME",
                "TTL": 60,
                "ResourceRecords": [{"Value": "db-primary.internal.example."}],
            }
        ],
    },
]


def before_all(context):
    """Set up test environment before all tests."""
    context.base_dir = Path(__file__).parent.parent
    context.test_data_dir = context.base_dir / "test_data"
    context.test_data_dir.mkdir(exist_ok=True)

    context.state_file = context.test_data_dir / "state.yaml"
    context.test_config = {
        "provider": "mock",
        "mock": {"zones": REMOTE_ZONES},
        "storage": {"state_file": str(context.state_file)},
        "accounts": [
            {"name": "production", "account_id": "123456789012"},
            {"name": "staging", "account_id": "210987654321"},
        ],
    }

    context.test_config_file = context.test_data_dir / "test_config.yaml"
    with open(context.test_config_file, "w") as f:
        yaml.dump(context.test_config, f)

    logger.info("Test environment setup complete")


def before_scenario(context, scenario):
    """Set up each test scenario."""
    context.scenario_name = scenario.name
    context.config_data = copy.deepcopy(context.test_config)
    context.result = None
    context.error = None

    if context.state_file.exists():
        context.state_file.unlink()

    logger.info(f"Starting scenario: {scenario.name}")


def after_scenario(context, scenario):
    """Clean up after each test scenario."""
    if context.state_file.exists():
        context.state_file.unlink()

    logger.info(f"Completed scenario: {scenario.name}")


def after_all(context):
    """Clean up test environment after all tests."""
    try:
        if context.test_data_dir.exists():
            shutil.rmtree(context.test_data_dir)
    except OSError as e:
        logger.warning(f"Failed to cleanup test data: {e}")

    logger.info("Test environment cleanup complete")
