"""
Shared test fixtures: fake AWS credentials, an isolated config.json and
clean logger state for every test.
"""

import logging
import sys
from pathlib import Path
from unittest.mock import patch

import boto3
import pytest
from moto import mock_aws

# Add the project root to the path so utils and iamxlib import
sys.path.insert(0, str(Path(__file__).parent.parent))
import iamxlib.config as cfg_mod
import utils
from iamxlib.config import ExportContext


@pytest.fixture(autouse=True)
def fake_aws_credentials(monkeypatch, tmp_path):
    """Prevent any accidental real AWS calls."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "aws-config"))
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "aws-credentials"))
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("IAMEXPORT_AUTO_RUN", raising=False)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path):
    """Point config.json at a temp file and reset the singleton."""
    cfg_mod._CONFIG_LOADED = False
    cfg_mod.CONFIG_DATA = {}
    with patch.object(cfg_mod, "_config_path", return_value=tmp_path / "config.json"):
        yield tmp_path / "config.json"
    cfg_mod._CONFIG_LOADED = False
    cfg_mod.CONFIG_DATA = {}


@pytest.fixture(autouse=True)
def reset_loggers():
    """Undo setup_logging() so caplog sees library records."""
    yield
    for name in (utils.LOGGER_NAME, "iamxlib"):
        configured = logging.getLogger(name)
        for handler in configured.handlers:
            handler.close()
        configured.handlers = []
        configured.propagate = True
        configured.setLevel(logging.NOTSET)
    utils.logger = None
    utils._logging_configured = False


@pytest.fixture
def iam():
    """Moto-backed IAM client."""
    with mock_aws():
        yield boto3.client("iam", region_name="us-east-1")


@pytest.fixture
def export_dir(tmp_path):
    return tmp_path / "export"


@pytest.fixture
def context(iam, export_dir):
    export_dir.mkdir()
    return ExportContext(profile="default", export_path=export_dir, iam_client=iam, tags_supported=True)
