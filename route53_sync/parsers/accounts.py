"""
Account definitions from configuration.

Each entry of the ``accounts`` list becomes an Account. Invalid entries are
logged and skipped so one bad account does not stop the others.
"""

import logging
import uuid
from typing import Dict, List

from ..core.models import Account
from ..providers.credentials import SUPPORTED_CREDENTIAL_TYPES
from ..utils.validators import is_uuid, validate_account_id, validate_endpoint, validate_partition

logger = logging.getLogger(__name__)

ACCOUNT_NAMESPACE = "route53-sync"


def account_uuid(name: str) -> uuid.UUID:
    """Stable account id derived from the account name."""
    return uuid.uuid5(uuid.NAMESPACE_DNS, f"{ACCOUNT_NAMESPACE}:{name}")


class AccountConfigParser:
    def __init__(self, config: Dict):
        self.entries = config.get("accounts") or []

    def parse(self) -> List[Account]:
        """Parse account definitions and validate them."""
        accounts = []
        seen = set()

        for index, entry in enumerate(self.entries, start=1):
            if not isinstance(entry, dict) or not entry.get("name"):
                logger.warning(f"Account entry {index} has no name, skipping")
                continue

            name = str(entry["name"]).strip()
            if name in seen:
                logger.warning(f"Duplicate account '{name}' at entry {index}, skipping")
                continue

            account_id = entry.get("account_id")
            if account_id is not None:
                account_id = str(account_id)
                if not validate_account_id(account_id):
                    logger.warning(f"Invalid account id for '{name}' at entry {index}, skipping")
                    continue

            partition = entry.get("partition", "aws")
            if not validate_partition(partition):
                logger.warning(f"Invalid partition for '{name}' at entry {index}, skipping")
                continue

            endpoint = entry.get("endpoint")
            if endpoint and not validate_endpoint(endpoint):
                logger.warning(f"Invalid endpoint for '{name}' at entry {index}, skipping")
                continue

            credentials = entry.get("credentials") or {}
            credentials_type = credentials.get("type", "instance_profile")
            if credentials_type not in SUPPORTED_CREDENTIAL_TYPES:
                logger.warning(
                    f"Unsupported credentials type '{credentials_type}' for '{name}', skipping"
                )
                continue

            explicit_id = entry.get("id")
            if explicit_id and not is_uuid(str(explicit_id)):
                logger.warning(f"Invalid UUID for '{name}' at entry {index}, skipping")
                continue

            accounts.append(
                Account(
                    id=uuid.UUID(str(explicit_id)) if explicit_id else account_uuid(name),
                    name=name,
                    account_id=account_id,
                    partition=partition,
                    default_region=entry.get("region", "us-east-1"),
                    endpoint=endpoint,
                    credentials_type=credentials_type,
                    credentials_params={k: v for k, v in credentials.items() if k != "type"},
                    tags=entry.get("tags"),
                    enabled=bool(entry.get("enabled", True)),
                )
            )
            seen.add(name)

        logger.info(f"Successfully parsed {len(accounts)} accounts from configuration")
        return accounts
