#!/usr/bin/env python3
"""
AWS Assume Role CLI
Assumes an IAM role (optionally with MFA) through STS and prints the temporary
credentials or runs a command with them injected into its environment.
"""

import logging
import os
import sys

import click

from . import __version__
from .config import MfaPolicy
from .console import Console
from .environment import capture_host_environment
from .runner import CommandRunner
from .sts import StsGateway
from .workflow import AssumeRoleWorkflow, OutputMode, WorkflowOptions


def configure_logging(verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )
    # Request signatures must never reach the log
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)


def run_workflow(options):
    console = Console()
    workflow = AssumeRoleWorkflow(
        sts_gateway=StsGateway(),
        command_runner=CommandRunner(console),
        console=console,
        host_env=capture_host_environment(os.environ),
    )
    outcome = workflow.run(options)
    if not outcome.succeeded:
        sys.exit(outcome.exit_code)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Log debug details to stderr')
@click.version_option(__version__, prog_name='aws-assume-role')
def cli(verbose):
    """AWS Assume Role Tool

    Assume an IAM role with STS and use the temporary credentials.
    """
    configure_logging(verbose)


@cli.command('assume-role')
@click.option('--aws-profile', help='The AWS CLI profile to use for retrieving RoleArn and MFA Serial.')
@click.option('--composer-command', help='The Composer command to execute after assuming the role.')
@click.option('--command', help='The command to execute after assuming the role.')
@click.option('--code', help='MFA token code (will prompt if not provided)')
def assume_role(aws_profile, composer_command, command, code):
    """Assume a role with MFA and print credentials as JSON or run a command"""
    run_workflow(WorkflowOptions(
        profile=aws_profile,
        command=command,
        composer_command=composer_command,
        mfa_code=code,
        mfa_policy=MfaPolicy.REQUIRED,
        print_mode=OutputMode.PRINT_JSON,
    ))


@cli.command('export')
@click.option('--aws-profile', help='The AWS CLI profile to use for retrieving RoleArn and optional MFA Serial.')
@click.option('--command', help='The command to execute after assuming the role.')
@click.option('--code', help='MFA token code (will prompt if MFA is configured and not provided)')
def export(aws_profile, command, code):
    """Assume a role and print shell export statements or run a command

    Use it as: eval "$(aws-assume-role export --aws-profile myprofile)"
    """
    run_workflow(WorkflowOptions(
        profile=aws_profile,
        command=command,
        mfa_code=code,
        mfa_policy=MfaPolicy.OPTIONAL,
        print_mode=OutputMode.PRINT_EXPORTS,
    ))


if __name__ == '__main__':
    cli()
