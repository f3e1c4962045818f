"""
Error types raised while assuming a role and running commands with the result.
"""


class AssumeRoleError(Exception):
    """Base class for every failure the CLI knows how to report"""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ConfigError(AssumeRoleError):
    """Local configuration problem"""


class ConfigFileMissing(ConfigError):
    def __init__(self, path):
        super().__init__(f"AWS config file not found at {path}")
        self.path = path


class ConfigFileInvalid(ConfigError):
    def __init__(self, path, reason):
        super().__init__(f"Could not parse AWS config file {path}: {reason}")
        self.path = path


class ConfigNotFound(ConfigError):
    def __init__(self, profile):
        super().__init__(f"Profile '{profile}' not found in AWS config file.")
        self.profile = profile


class ConfigIncomplete(ConfigError):
    def __init__(self, profile, required_keys):
        keys = " and ".join(f"'{key}'" for key in required_keys)
        if profile is None:
            message = f"Manual configuration must have {keys} defined."
        else:
            message = f"Profile '{profile}' must have {keys} defined."
        super().__init__(message)
        self.profile = profile
        self.required_keys = tuple(required_keys)


class CredentialsUnavailable(AssumeRoleError):
    """The base credentials needed to call STS could not be resolved"""


class AwsError(AssumeRoleError):
    """Any other failure reported by AWS, carried with its error code"""

    def __init__(self, code, message):
        super().__init__(message)
        self.code = code


class NetworkError(AwsError):
    """The STS endpoint could not be reached"""


class CommandExecutionFailed(AssumeRoleError):
    def __init__(self, command, exit_status, detail=None):
        message = f'The command "{command}" failed.\n\nExit Code: {exit_status}'
        if detail:
            message = f"{message}\n\n{detail}"
        super().__init__(message)
        self.command = command
        self.exit_status = exit_status


class MutuallyExclusiveFlags(AssumeRoleError):
    def __init__(self, *flags):
        names = " and ".join(flags)
        super().__init__(f"You cannot specify both {names} options at the same time.")
        self.flags = flags
