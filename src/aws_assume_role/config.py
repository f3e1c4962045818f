"""
Role configuration resolution

Reads the role to assume either from a named profile in the AWS CLI config file
or by asking the operator for it.
"""

import configparser
import enum
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import click

from .exceptions import ConfigFileInvalid, ConfigFileMissing, ConfigIncomplete, ConfigNotFound

logger = logging.getLogger(__name__)

DEFAULT_REGION = 'us-east-1'


class MfaPolicy(enum.Enum):
    REQUIRED = 'required'
    OPTIONAL = 'optional'


@dataclass(frozen=True)
class BaseCredentials:
    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class RoleConfig:
    role_arn: str
    mfa_serial: Optional[str] = None
    region: str = DEFAULT_REGION
    source_profile: Optional[str] = None
    role_session_name: Optional[str] = None
    duration_seconds: Optional[int] = None
    # Profile whose credentials sign the AssumeRole call
    credentials_profile: Optional[str] = None
    base_credentials: Optional[BaseCredentials] = field(default=None, repr=False)


def _aws_file_path(environ, override_var, filename):
    environ = os.environ if environ is None else environ

    override = environ.get(override_var)
    if override:
        return Path(override).expanduser()

    home_dir = environ.get('HOME') or environ.get('USERPROFILE')
    if home_dir:
        return Path(home_dir) / '.aws' / filename

    return Path.home() / '.aws' / filename


def aws_config_path(environ=None):
    """Locate the AWS CLI config file"""
    return _aws_file_path(environ, 'AWS_CONFIG_FILE', 'config')


def aws_credentials_path(environ=None):
    """Locate the AWS shared credentials file"""
    return _aws_file_path(environ, 'AWS_SHARED_CREDENTIALS_FILE', 'credentials')


def profile_section_name(profile_name):
    return f'profile {profile_name}'


class ProfileConfigResolver:
    def __init__(self, profile_name, mfa_policy=MfaPolicy.REQUIRED, config_file=None,
                 credentials_file=None):
        self.profile_name = profile_name
        self.mfa_policy = mfa_policy
        self.config_file = Path(config_file) if config_file is not None else aws_config_path()
        self.credentials_file = (Path(credentials_file) if credentials_file is not None
                                 else aws_credentials_path())

    def resolve(self):
        """Read role_arn, mfa_serial and region for the profile"""
        section = self._load_section()

        role_arn = section.get('role_arn', '').strip()
        mfa_serial = section.get('mfa_serial', '').strip() or None

        required = ['role_arn']
        if self.mfa_policy is MfaPolicy.REQUIRED:
            required.append('mfa_serial')

        if not role_arn or (self.mfa_policy is MfaPolicy.REQUIRED and not mfa_serial):
            raise ConfigIncomplete(self.profile_name, required)

        source_profile = section.get('source_profile', '').strip() or None
        base_credentials = None
        credentials_profile = source_profile
        if source_profile is None:
            base_credentials = self._shared_credentials()
            if base_credentials is not None:
                credentials_profile = self.profile_name
            else:
                logger.warning("Profile '%s' has no source_profile and no keys in %s, "
                               "using the default credential chain to call STS",
                               self.profile_name, self.credentials_file)

        config = RoleConfig(
            role_arn=role_arn,
            mfa_serial=mfa_serial,
            region=section.get('region', '').strip() or DEFAULT_REGION,
            source_profile=source_profile,
            role_session_name=section.get('role_session_name', '').strip() or None,
            duration_seconds=self._duration(section),
            credentials_profile=credentials_profile,
            base_credentials=base_credentials,
        )
        logger.debug("Resolved profile %s from %s: role=%s region=%s mfa=%s credentials=%s",
                     self.profile_name, self.config_file, config.role_arn,
                     config.region, bool(config.mfa_serial), config.credentials_profile)
        return config

    def _read(self, path):
        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read(path, encoding='utf-8')
        except configparser.Error as e:
            raise ConfigFileInvalid(path, e) from e
        return parser

    def _load_section(self):
        if not self.config_file.exists():
            raise ConfigFileMissing(self.config_file)

        parser = self._read(self.config_file)

        section_name = profile_section_name(self.profile_name)
        if section_name in parser:
            return parser[section_name]

        # The default profile is written as a bare [default] section
        if self.profile_name == 'default' and 'default' in parser:
            return parser['default']

        raise ConfigNotFound(self.profile_name)

    def _shared_credentials(self):
        """Static keys stored for the profile itself in the credentials file"""
        if not self.credentials_file.exists():
            return None

        parser = self._read(self.credentials_file)
        if self.profile_name not in parser:
            return None

        section = parser[self.profile_name]
        access_key_id = section.get('aws_access_key_id', '').strip()
        secret_access_key = section.get('aws_secret_access_key', '').strip()
        if not access_key_id or not secret_access_key:
            return None

        return BaseCredentials(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=section.get('aws_session_token', '').strip() or None,
        )

    def _duration(self, section):
        raw = section.get('duration_seconds', '').strip()
        if not raw:
            return None
        try:
            return int(raw)
        except ValueError:
            raise ConfigFileInvalid(
                self.config_file,
                f"duration_seconds for profile '{self.profile_name}' must be an integer",
            )


class InteractiveConfigResolver:
    """Ask the operator for the role to assume"""

    def __init__(self, mfa_policy=MfaPolicy.REQUIRED, prompt=click.prompt):
        self.mfa_policy = mfa_policy
        self.prompt = prompt

    def resolve(self):
        role_arn = self.prompt('Enter the Role ARN', err=True).strip()

        if self.mfa_policy is MfaPolicy.REQUIRED:
            mfa_serial = self.prompt('Enter your MFA Device ARN', err=True).strip()
        else:
            mfa_serial = self.prompt(
                'Enter your MFA Device ARN (leave blank if MFA is not required)',
                default='', show_default=False, err=True,
            ).strip()

        region = self.prompt('Enter the AWS region', default=DEFAULT_REGION, err=True).strip()

        required = ['role_arn'] if self.mfa_policy is MfaPolicy.OPTIONAL else ['role_arn', 'mfa_serial']
        if not role_arn or (self.mfa_policy is MfaPolicy.REQUIRED and not mfa_serial):
            raise ConfigIncomplete(None, required)

        return RoleConfig(
            role_arn=role_arn,
            mfa_serial=mfa_serial or None,
            region=region or DEFAULT_REGION,
        )
