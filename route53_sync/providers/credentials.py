"""
Credential resolution for provider accounts.

Each credential kind has its own session builder. Unknown kinds and
missing parameters are rejected with a ConfigurationError instead of
producing a client that fails later on its first call.
"""

import logging
from pathlib import Path
from typing import Callable, Dict

import boto3

from ..core.exceptions import ConfigurationError
from ..core.models import Account

logger = logging.getLogger(__name__)

DEFAULT_SESSION_NAME = "route53-sync"


def _require(params: Dict, key: str, kind: str) -> str:
    value = params.get(key)
    if not value:
        raise ConfigurationError.invalid_configuration(
            f"credentials.{key}", f"required for {kind} credentials"
        )
    return value


def _session_from_credentials(credentials: Dict, region: str) -> boto3.Session:
    return boto3.Session(
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
        region_name=region,
    )


def profile_session(account: Account, params: Dict) -> boto3.Session:
    profile = _require(params, "profile", "profile")
    return boto3.Session(profile_name=profile, region_name=account.default_region)


def access_key_session(account: Account, params: Dict) -> boto3.Session:
    return boto3.Session(
        aws_access_key_id=_require(params, "access_key_id", "access_key"),
        aws_secret_access_key=_require(params, "secret_access_key", "access_key"),
        aws_session_token=params.get("session_token"),
        region_name=account.default_region,
    )


def assume_role_session(account: Account, params: Dict) -> boto3.Session:
    role_arn = _require(params, "role_arn", "assume_role")
    source_profile = params.get("source_profile")
    base = boto3.Session(profile_name=source_profile, region_name=account.default_region)

    request = {
        "RoleArn": role_arn,
        "RoleSessionName": params.get("session_name", DEFAULT_SESSION_NAME),
    }
    if params.get("external_id"):
        request["ExternalId"] = params["external_id"]
    if params.get("duration_seconds"):
        request["DurationSeconds"] = int(params["duration_seconds"])

    logger.debug(f"Assuming role {role_arn} for account {account.name}")
    response = base.client("sts", region_name=account.default_region).assume_role(**request)
    return _session_from_credentials(response["Credentials"], account.default_region)


def web_identity_session(account: Account, params: Dict) -> boto3.Session:
    role_arn = _require(params, "role_arn", "web_identity")
    token_file = Path(_require(params, "token_file", "web_identity"))
    if not token_file.exists():
        raise ConfigurationError.invalid_configuration(
            "credentials.token_file", f"{token_file} does not exist"
        )

    logger.debug(f"Assuming role {role_arn} with web identity for account {account.name}")
    sts = boto3.Session(region_name=account.default_region).client("sts")
    response = sts.assume_role_with_web_identity(
        RoleArn=role_arn,
        RoleSessionName=params.get("session_name", DEFAULT_SESSION_NAME),
        WebIdentityToken=token_file.read_text().strip(),
    )
    return _session_from_credentials(response["Credentials"], account.default_region)


def default_chain_session(account: Account, params: Dict) -> boto3.Session:
    """Instance profile and environment credentials come from the default chain."""
    return boto3.Session(region_name=account.default_region)


CREDENTIAL_BUILDERS: Dict[str, Callable[[Account, Dict], boto3.Session]] = {
    "profile": profile_session,
    "access_key": access_key_session,
    "assume_role": assume_role_session,
    "web_identity": web_identity_session,
    "instance_profile": default_chain_session,
    "env": default_chain_session,
}

SUPPORTED_CREDENTIAL_TYPES = tuple(CREDENTIAL_BUILDERS)


def build_session(account: Account) -> boto3.Session:
    """
    Build a boto3 session for an account.

    Args:
        account: Account whose credential kind and parameters to use

    Returns:
        Session carrying the account's credentials and default region

    Raises:
        ConfigurationError: If the credential kind is unknown or incomplete
    """
    builder = CREDENTIAL_BUILDERS.get(account.credentials_type)
    if builder is None:
        raise ConfigurationError.unsupported_credentials_type(account.credentials_type)
    return builder(account, account.credentials_params or {})
