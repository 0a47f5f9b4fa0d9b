"""
iamxlib.aws_client — Profile-aware boto3 client factory and IAM capability checks.

Every client is created from an explicit named profile; the credential chain
itself is left to boto3. Retry and timeout settings come from config.json
(aws_sdk_config).

Imports from iamxlib.config. Zero dependency on utils.py.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, NoCredentialsError, ProfileNotFound

from iamxlib.config import DEFAULT_PROFILE, config_value

logger = logging.getLogger(__name__)

_DEFAULT_RETRIES: Dict[str, Any] = {"max_attempts": 5, "mode": "adaptive"}


# ---------------------------------------------------------------------------
# Error description
# ---------------------------------------------------------------------------


def describe_aws_error(error: BaseException) -> str:
    """
    Produce a one-line description of an AWS SDK error for log output.

    Args:
        error: Exception raised by boto3/botocore (or anything else)

    Returns:
        str: e.g. ``AWS error [NoSuchEntity]: The user with name bob cannot be found.``
    """
    if isinstance(error, NoCredentialsError):
        return (
            "No AWS credentials found. Please configure credentials using "
            "'aws configure' or environment variables."
        )
    if isinstance(error, ProfileNotFound):
        return f"AWS profile not found: {error}"
    if isinstance(error, ClientError):
        error_code = error.response.get("Error", {}).get("Code", "Unknown")
        error_msg = error.response.get("Error", {}).get("Message", str(error))
        return f"AWS error [{error_code}]: {error_msg}"
    return f"{type(error).__name__}: {error}"


# ---------------------------------------------------------------------------
# Session and client factory
# ---------------------------------------------------------------------------


def get_aws_session(profile: Optional[str] = None, region_name: Optional[str] = None):
    """
    Create a boto3 session for the named profile.

    Args:
        profile: Named credential profile (None = boto3 default chain)
        region_name: AWS region (None = profile default)

    Returns:
        boto3.Session: Configured session

    Raises:
        botocore.exceptions.ProfileNotFound: if the profile is not configured
    """
    # "default" without a [default] section means the environment/instance chain
    if profile == DEFAULT_PROFILE and profile not in boto3.Session().available_profiles:
        profile = None
    return boto3.Session(profile_name=profile, region_name=region_name)


def build_client_config() -> Config:
    """
    Build the botocore Config used for every client.

    Returns:
        botocore.config.Config: retry and timeout configuration
    """
    sdk_config = config_value("aws_sdk_config", default={}) or {}

    return Config(
        retries=sdk_config.get("retries", _DEFAULT_RETRIES),
        connect_timeout=sdk_config.get("connect_timeout", 10),
        read_timeout=sdk_config.get("read_timeout", 60),
    )


def get_boto3_client(
    service: str,
    profile: Optional[str] = None,
    region_name: Optional[str] = None,
    **kwargs,
):
    """
    Create boto3 client with standard configuration including retries.

    Args:
        service: AWS service name (e.g., 'iam', 'sts')
        profile: Named credential profile
        region_name: AWS region name (optional; IAM is global)
        **kwargs: Additional arguments to pass to client creation

    Returns:
        boto3.client: Configured boto3 client with retry logic
    """
    session = get_aws_session(profile, region_name)
    return session.client(service, config=build_client_config(), **kwargs)


# ---------------------------------------------------------------------------
# Capability checks
# ---------------------------------------------------------------------------


def supports_user_tags(iam_client) -> bool:
    """
    Check whether the IAM API surface exposes the ListUserTags operation.

    Older SDK service models predate IAM user tagging. The check reads the
    client's service model, so it makes no remote call.

    Args:
        iam_client: boto3 IAM client

    Returns:
        bool: True if ListUserTags is available
    """
    try:
        operations = iam_client.meta.service_model.operation_names
    except AttributeError:
        return hasattr(iam_client, "list_user_tags")
    return "ListUserTags" in operations


# ---------------------------------------------------------------------------
# Credential validation
# ---------------------------------------------------------------------------


def validate_aws_credentials(profile: Optional[str] = None) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Validate AWS credentials for a profile.

    Args:
        profile: Named credential profile

    Returns:
        tuple: (is_valid, account_id, error_message)
    """
    try:
        sts = get_boto3_client("sts", profile=profile)
        response = sts.get_caller_identity()
        return True, response["Account"], None
    except Exception as e:
        logger.debug("Credential validation failed for profile %s: %s", profile, e)
        return False, None, describe_aws_error(e)
