"""AWS Assume Role Tools

This package assumes an AWS IAM role through STS, optionally with MFA, and either
prints the temporary credentials or runs a command with them in its environment.

Main components:
- config: Role configuration from an AWS CLI profile or interactive prompts
- sts: STS AssumeRole gateway
- workflow: Orchestration and error reporting
- cli: Command line interface
"""

__version__ = "1.0.0"
__author__ = "AWS Assume Role Team"

__all__ = [
    "AssumeRoleWorkflow",
    "CommandRunner",
    "InteractiveConfigResolver",
    "ProfileConfigResolver",
    "StsGateway",
]

from .config import InteractiveConfigResolver, ProfileConfigResolver
from .runner import CommandRunner
from .sts import StsGateway
from .workflow import AssumeRoleWorkflow
