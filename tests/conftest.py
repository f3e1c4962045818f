"""Shared fixtures for the aws_assume_role tests."""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from aws_assume_role.sts import TemporaryCredentials

ROLE_ARN = "arn:aws:iam::123456789012:role/DeployRole"
MFA_SERIAL = "arn:aws:iam::123456789012:mfa/alice"

AWS_CONFIG = f"""
[default]
region = eu-west-1

[profile deploy]
role_arn = {ROLE_ARN}
mfa_serial = {MFA_SERIAL}
region = eu-central-1
source_profile = default

[profile no-region]
role_arn = {ROLE_ARN}
mfa_serial = {MFA_SERIAL}

[profile no-mfa]
role_arn = {ROLE_ARN}
region = ap-southeast-1

[profile no-role]
mfa_serial = {MFA_SERIAL}

[profile tuned]
role_arn = {ROLE_ARN}
role_session_name = ci-pipeline
duration_seconds = 900

[profile bad-duration]
role_arn = {ROLE_ARN}
duration_seconds = forever

[profile keys-only]
role_arn = {ROLE_ARN}
mfa_serial = {MFA_SERIAL}

[profile half-keys]
role_arn = {ROLE_ARN}
"""

AWS_CREDENTIALS = """
[default]
aws_access_key_id = AKIADEFAULTEXAMPLE
aws_secret_access_key = default-secret

[keys-only]
aws_access_key_id = AKIAKEYSONLYEXAMPLE
aws_secret_access_key = keys-only-secret

[half-keys]
aws_access_key_id = AKIAHALFEXAMPLE
"""


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep the real ~/.aws out of every test."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("AWS_CONFIG_FILE", raising=False)
    monkeypatch.delenv("AWS_SHARED_CREDENTIALS_FILE", raising=False)
    return tmp_path


@pytest.fixture
def aws_config_file(tmp_path: Path) -> Path:
    """Write an AWS config file under a fake home directory."""
    config_file = tmp_path / ".aws" / "config"
    config_file.parent.mkdir(exist_ok=True)
    config_file.write_text(AWS_CONFIG, encoding="utf-8")
    return config_file


@pytest.fixture
def aws_credentials_file(tmp_path: Path) -> Path:
    credentials_file = tmp_path / ".aws" / "credentials"
    credentials_file.parent.mkdir(exist_ok=True)
    credentials_file.write_text(AWS_CREDENTIALS, encoding="utf-8")
    return credentials_file


@pytest.fixture
def credentials() -> TemporaryCredentials:
    return TemporaryCredentials(
        access_key_id="ASIAEXAMPLEKEYID",
        secret_access_key="wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY",
        session_token="FwoGZXIvYXdzEBYaDH+token==",
        expiration=datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def sts_gateway(credentials: TemporaryCredentials) -> MagicMock:
    gateway = MagicMock()
    gateway.assume_role.return_value = credentials
    return gateway
