"""
Unit tests for iamxlib.aws_client — profile-aware client factory and capability checks.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import boto3
import pytest
from botocore.exceptions import ClientError, NoCredentialsError, ProfileNotFound
from moto import mock_aws

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
import iamxlib.aws_client as aws_mod
from iamxlib.aws_client import (
    build_client_config,
    describe_aws_error,
    get_aws_session,
    get_boto3_client,
    supports_user_tags,
    validate_aws_credentials,
)


# ---------------------------------------------------------------------------
# describe_aws_error
# ---------------------------------------------------------------------------


class TestDescribeAwsError:
    def test_client_error_includes_code_and_message(self):
        error = ClientError(
            {"Error": {"Code": "NoSuchEntity", "Message": "The user with name bob cannot be found."}},
            "GetUser",
        )
        assert describe_aws_error(error) == (
            "AWS error [NoSuchEntity]: The user with name bob cannot be found."
        )

    def test_no_credentials(self):
        assert "No AWS credentials found" in describe_aws_error(NoCredentialsError())

    def test_profile_not_found(self):
        assert "profile not found" in describe_aws_error(ProfileNotFound(profile="nope"))

    def test_generic_exception(self):
        assert describe_aws_error(ValueError("bad")) == "ValueError: bad"


# ---------------------------------------------------------------------------
# Sessions and clients
# ---------------------------------------------------------------------------


class TestGetAwsSession:
    def test_default_without_config_uses_credential_chain(self):
        session = get_aws_session("default")
        assert session.profile_name == "default"
        assert session.get_credentials().access_key == "testing"

    def test_unknown_profile_raises(self):
        with pytest.raises(ProfileNotFound):
            get_boto3_client("iam", profile="does-not-exist")

    def test_named_profile_passed_through(self):
        with patch.object(aws_mod.boto3, "Session") as session_cls:
            session_cls.return_value.available_profiles = ["audit"]
            get_aws_session("audit")
        session_cls.assert_called_with(profile_name="audit", region_name=None)

    def test_missing_default_section_maps_to_none(self):
        with patch.object(aws_mod.boto3, "Session") as session_cls:
            session_cls.return_value.available_profiles = []
            get_aws_session("default")
        session_cls.assert_called_with(profile_name=None, region_name=None)


class TestBuildClientConfig:
    def test_uses_configured_values(self):
        sdk = {"retries": {"max_attempts": 2, "mode": "standard"}, "connect_timeout": 3, "read_timeout": 4}
        with patch.object(aws_mod, "config_value", return_value=sdk):
            config = build_client_config()
        assert config.retries == {"max_attempts": 2, "mode": "standard"}
        assert config.connect_timeout == 3
        assert config.read_timeout == 4

    def test_defaults_when_unset(self):
        with patch.object(aws_mod, "config_value", return_value=None):
            config = build_client_config()
        assert config.retries == {"max_attempts": 5, "mode": "adaptive"}


class TestGetBoto3Client:
    def test_creates_iam_client(self):
        client = get_boto3_client("iam", profile="default")
        assert client.meta.service_model.service_name == "iam"


# ---------------------------------------------------------------------------
# Capability checks
# ---------------------------------------------------------------------------


class TestSupportsUserTags:
    def test_current_sdk_has_list_user_tags(self):
        client = boto3.client("iam", region_name="us-east-1")
        assert supports_user_tags(client) is True

    def test_missing_operation(self):
        client = MagicMock()
        client.meta.service_model.operation_names = ["ListUsers", "GetUser"]
        assert supports_user_tags(client) is False

    def test_client_without_service_model(self):
        class Bare:
            pass

        assert supports_user_tags(Bare()) is False


# ---------------------------------------------------------------------------
# Credential validation
# ---------------------------------------------------------------------------


class TestValidateAwsCredentials:
    @mock_aws
    def test_valid_credentials(self):
        ok, account_id, error = validate_aws_credentials("default")
        assert ok is True
        assert account_id == "123456789012"
        assert error is None

    def test_invalid_profile(self):
        ok, account_id, error = validate_aws_credentials("does-not-exist")
        assert ok is False
        assert account_id is None
        assert error.startswith("AWS profile not found")
