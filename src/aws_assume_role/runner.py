"""
Run a shell command with an injected environment, streaming its output.
"""

import codecs
import logging
import subprocess

from .exceptions import CommandExecutionFailed

logger = logging.getLogger(__name__)

# Exit status a shell reports for a command it cannot run
COMMAND_NOT_RUNNABLE = 127

CHUNK_SIZE = 4096


class CommandRunner:
    def __init__(self, console):
        self.console = console

    def run(self, command, env):
        """Run the command to completion and return its exit status"""
        logger.debug("Running %r", command)
        try:
            process = subprocess.Popen(
                command,
                shell=True,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            raise CommandExecutionFailed(command, COMMAND_NOT_RUNNABLE, str(e)) from e

        with process:
            decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
            # read1 returns whatever is available, partial lines included
            for chunk in iter(lambda: process.stdout.read1(CHUNK_SIZE), b''):
                text = decoder.decode(chunk)
                if text:
                    self.console.stream(text)
            tail = decoder.decode(b'', final=True)
            if tail:
                self.console.stream(tail)
            # No timeout, a hung child blocks until it is killed externally
            exit_status = process.wait()

        logger.debug("%r exited with status %s", command, exit_status)
        if exit_status != 0:
            raise CommandExecutionFailed(command, exit_status)
        return exit_status
