"""
STS AssumeRole gateway

Wraps the boto3 STS client and turns botocore failures into the errors the
workflow reports.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import (
    ClientError,
    ConnectionError as BotocoreConnectionError,
    HTTPClientError,
    NoCredentialsError,
    PartialCredentialsError,
    ProfileNotFound,
)

from .config import BaseCredentials
from .exceptions import AwsError, CredentialsUnavailable, NetworkError

logger = logging.getLogger(__name__)

SESSION_NAME_PREFIX = 'AssumeRoleSession_'

# MFA codes are single use, a failed call is never retried
NO_RETRY_CONFIG = Config(retries={'max_attempts': 1, 'mode': 'standard'})


@dataclass(frozen=True)
class TemporaryCredentials:
    access_key_id: str
    secret_access_key: str
    session_token: str
    expiration: Optional[datetime] = None

    def to_dict(self):
        return {
            'AccessKeyId': self.access_key_id,
            'SecretAccessKey': self.secret_access_key,
            'SessionToken': self.session_token,
        }


@dataclass(frozen=True)
class AssumeRoleRequest:
    role_arn: str
    session_name: str
    region: str
    profile: Optional[str] = None
    mfa_serial: Optional[str] = None
    mfa_token: Optional[str] = None
    duration_seconds: Optional[int] = None
    base_credentials: Optional[BaseCredentials] = field(default=None, repr=False)

    def to_api_params(self):
        params = {
            'RoleArn': self.role_arn,
            'RoleSessionName': self.session_name,
        }
        if self.mfa_serial:
            params['SerialNumber'] = self.mfa_serial
            params['TokenCode'] = self.mfa_token
        if self.duration_seconds:
            params['DurationSeconds'] = self.duration_seconds
        return params


def generate_session_name(now=None):
    """Session name hint, unique per second"""
    timestamp = int(time.time() if now is None else now)
    return f'{SESSION_NAME_PREFIX}{timestamp}'


def default_client_factory(request):
    base = request.base_credentials
    if base is not None:
        # Named profiles that carry role_arn would make boto3 assume the role itself
        session = boto3.Session(
            aws_access_key_id=base.access_key_id,
            aws_secret_access_key=base.secret_access_key,
            aws_session_token=base.session_token,
            region_name=request.region,
        )
    else:
        session = boto3.Session(profile_name=request.profile, region_name=request.region)
    return session.client('sts', config=NO_RETRY_CONFIG)


class StsGateway:
    def __init__(self, client_factory=default_client_factory):
        self.client_factory = client_factory

    def assume_role(self, request):
        """Call sts:AssumeRole and return the temporary credentials"""
        logger.debug("Assuming %s as session %s in %s (profile=%s, mfa=%s)",
                     request.role_arn, request.session_name, request.region,
                     request.profile, bool(request.mfa_serial))
        try:
            sts = self.client_factory(request)
            response = sts.assume_role(**request.to_api_params())
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            error_message = e.response.get('Error', {}).get('Message', str(e))
            if error_code == 'CredentialsError':
                raise CredentialsUnavailable(f"Failed to retrieve credentials. {error_message}") from e
            raise AwsError(error_code, error_message) from e
        except (NoCredentialsError, PartialCredentialsError, ProfileNotFound) as e:
            raise CredentialsUnavailable(f"Failed to retrieve credentials. {e}") from e
        except (BotocoreConnectionError, HTTPClientError) as e:
            raise NetworkError(type(e).__name__, str(e)) from e

        credentials = response['Credentials']
        return TemporaryCredentials(
            access_key_id=credentials['AccessKeyId'],
            secret_access_key=credentials['SecretAccessKey'],
            session_token=credentials['SessionToken'],
            expiration=credentials.get('Expiration'),
        )
