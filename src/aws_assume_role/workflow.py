"""
Assume role workflow

Resolves the role configuration, collects the MFA token, assumes the role and
hands the temporary credentials to exactly one output mode. Every handled
failure is reported on the console and turned into exit code 1.
"""

import enum
import json
import logging
from dataclasses import dataclass
from typing import Optional

import click

from .config import InteractiveConfigResolver, MfaPolicy, ProfileConfigResolver
from .environment import build_exec_env, build_export_text
from .exceptions import (
    AwsError,
    CommandExecutionFailed,
    ConfigError,
    ConfigFileMissing,
    ConfigIncomplete,
    ConfigNotFound,
    CredentialsUnavailable,
    MutuallyExclusiveFlags,
    NetworkError,
)
from .sts import AssumeRoleRequest, generate_session_name

logger = logging.getLogger(__name__)

COMPOSER_BINARY = 'composer'

# Substrings of transport failures reported by the AWS SDKs
NETWORK_ERROR_INDICATORS = (
    'cURL error',
    'Could not connect to the endpoint URL',
    'Connection was closed',
    'Connect timeout',
    'Read timeout',
)


class OutputMode(enum.Enum):
    PRINT_JSON = 'json'
    PRINT_EXPORTS = 'exports'
    RUN_COMMAND = 'command'


class ErrorKind(enum.Enum):
    CONFIG_FILE_MISSING = 'config_file_missing'
    CONFIG_NOT_FOUND = 'config_not_found'
    CONFIG_INCOMPLETE = 'config_incomplete'
    CONFIG_FILE_INVALID = 'config_file_invalid'
    CREDENTIALS_UNAVAILABLE = 'credentials_unavailable'
    NETWORK_ERROR = 'network_error'
    INVALID_CREDENTIALS = 'invalid_credentials'
    ACCESS_DENIED = 'access_denied'
    UNRECOGNIZED_CLIENT = 'unrecognized_client'
    OTHER_AWS_ERROR = 'other_aws_error'
    COMMAND_EXECUTION_FAILED = 'command_execution_failed'
    MUTUALLY_EXCLUSIVE_FLAGS = 'mutually_exclusive_flags'
    UNEXPECTED = 'unexpected'


@dataclass(frozen=True)
class ExecutionOutcome:
    payload: Optional[str] = None
    exit_status: Optional[int] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def printed(cls, payload):
        return cls(payload=payload)

    @classmethod
    def ran_command(cls, exit_status):
        return cls(exit_status=exit_status)

    @classmethod
    def failure(cls, error_kind, message):
        return cls(error_kind=error_kind, message=message)

    @property
    def succeeded(self):
        return self.error_kind is None

    @property
    def exit_code(self):
        return 0 if self.succeeded else 1


@dataclass(frozen=True)
class WorkflowOptions:
    profile: Optional[str] = None
    command: Optional[str] = None
    composer_command: Optional[str] = None
    mfa_code: Optional[str] = None
    mfa_policy: MfaPolicy = MfaPolicy.REQUIRED
    print_mode: OutputMode = OutputMode.PRINT_JSON

    def command_line(self):
        if self.composer_command:
            return f'{COMPOSER_BINARY} {self.composer_command}'
        return self.command

    @property
    def output_mode(self):
        if self.command or self.composer_command:
            return OutputMode.RUN_COMMAND
        return self.print_mode


def classify_aws_error(error):
    """Map an AWS error code/message to an ErrorKind and its console lines"""
    if isinstance(error, NetworkError) or any(
            indicator in error.message for indicator in NETWORK_ERROR_INDICATORS):
        return ErrorKind.NETWORK_ERROR, [
            ('error', 'Network error while retrieving AWS credentials.'),
            ('error', error.message),
            ('comment', 'Please check your network connectivity and AWS SDK configuration.'),
        ]

    if error.code in ('InvalidClientTokenId', 'SignatureDoesNotMatch'):
        return ErrorKind.INVALID_CREDENTIALS, [
            ('error', 'Invalid AWS credentials. Please check your AWS profile configuration.'),
        ]

    if error.code == 'AccessDenied':
        return ErrorKind.ACCESS_DENIED, [
            ('error', 'Access denied. Please ensure your AWS credentials have the necessary permissions.'),
        ]

    if error.code == 'UnrecognizedClient':
        return ErrorKind.UNRECOGNIZED_CLIENT, [
            ('error', 'Unrecognized AWS client. Please verify your AWS SDK configuration.'),
        ]

    return ErrorKind.OTHER_AWS_ERROR, [
        ('error', f'AWS Error [{error.code}]: {error.message}'),
    ]


def classify_config_error(error):
    if isinstance(error, ConfigFileMissing):
        return ErrorKind.CONFIG_FILE_MISSING
    if isinstance(error, ConfigNotFound):
        return ErrorKind.CONFIG_NOT_FOUND
    if isinstance(error, ConfigIncomplete):
        return ErrorKind.CONFIG_INCOMPLETE
    return ErrorKind.CONFIG_FILE_INVALID


class AssumeRoleWorkflow:
    def __init__(self, sts_gateway, command_runner, console, host_env,
                 prompt=click.prompt, config_file=None, credentials_file=None):
        self.sts_gateway = sts_gateway
        self.command_runner = command_runner
        self.console = console
        self.host_env = host_env
        self.prompt = prompt
        self.config_file = config_file
        self.credentials_file = credentials_file

    def run(self, options):
        """Execute one invocation and report its outcome"""
        try:
            return self._execute(options)
        except ConfigError as e:
            return self._fail(classify_config_error(e), [('error', e.message)])
        except CredentialsUnavailable as e:
            return self._fail(ErrorKind.CREDENTIALS_UNAVAILABLE, [
                ('error', 'Failed to retrieve AWS credentials.'),
                ('error', f'Reason: {e.message}'),
                ('comment', 'Please ensure that your AWS credentials are correctly configured '
                            'and have the necessary permissions.'),
            ])
        except AwsError as e:
            kind, lines = classify_aws_error(e)
            return self._fail(kind, lines)
        except CommandExecutionFailed as e:
            return self._fail(ErrorKind.COMMAND_EXECUTION_FAILED,
                              [('error', f'Command Execution Failed: {e.message}')])
        except MutuallyExclusiveFlags as e:
            return self._fail(ErrorKind.MUTUALLY_EXCLUSIVE_FLAGS, [('error', e.message)])
        except click.Abort:
            raise
        except Exception as e:
            logger.debug("Unexpected failure", exc_info=True)
            return self._fail(ErrorKind.UNEXPECTED, [('error', f'Error: {e}')])

    def _execute(self, options):
        if options.command and options.composer_command:
            raise MutuallyExclusiveFlags('--composer-command', '--command')

        config = self._resolve_config(options)
        mfa_token = self._mfa_token(config, options)

        request = AssumeRoleRequest(
            role_arn=config.role_arn,
            session_name=config.role_session_name or generate_session_name(),
            region=config.region,
            profile=config.credentials_profile,
            mfa_serial=config.mfa_serial,
            mfa_token=mfa_token,
            duration_seconds=config.duration_seconds,
            base_credentials=config.base_credentials,
        )
        credentials = self.sts_gateway.assume_role(request)

        mode = options.output_mode
        if mode is OutputMode.RUN_COMMAND:
            command_line = options.command_line()
            self.console.info('AssumeRole succeeded! Temporary credentials have been set.')
            self.console.note(f'Executing command: {command_line}')
            env = build_exec_env(self.host_env, credentials)
            exit_status = self.command_runner.run(command_line, env)
            return ExecutionOutcome.ran_command(exit_status)

        self.console.info('AssumeRole succeeded! Temporary credentials have been retrieved.')
        if credentials.expiration is not None:
            local_expiration = credentials.expiration.astimezone()
            self.console.note(f"🕒 Credentials expire at: {local_expiration.strftime('%Y-%m-%d %H:%M:%S %Z')}")

        if mode is OutputMode.PRINT_EXPORTS:
            payload = build_export_text(credentials)
        else:
            payload = json.dumps(credentials.to_dict(), indent=4)
        self.console.write(payload)
        return ExecutionOutcome.printed(payload)

    def _resolve_config(self, options):
        if options.profile:
            self.console.note(f'Using AWS profile: {options.profile}')
            resolver = ProfileConfigResolver(options.profile, options.mfa_policy,
                                             self.config_file, self.credentials_file)
        else:
            self.console.comment('No profile specified. Please enter details manually.')
            resolver = InteractiveConfigResolver(options.mfa_policy, self.prompt)
        return resolver.resolve()

    def _mfa_token(self, config, options):
        if not config.mfa_serial:
            if options.mfa_code:
                logger.warning("Ignoring --code, no MFA serial is configured for this role")
            return None
        if options.mfa_code:
            return options.mfa_code.strip()
        return self.prompt('Enter your AWS MFA token', err=True).strip()

    def _fail(self, kind, lines):
        logger.debug("Failed with %s", kind.name)
        for level, text in lines:
            if level == 'comment':
                self.console.comment(text)
            else:
                self.console.error(text)
        message = '\n'.join(text for _, text in lines)
        return ExecutionOutcome.failure(kind, message)
