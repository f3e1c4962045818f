"""
User-facing output

Status and error lines go to stderr so that stdout carries only the payload
(credentials JSON, export statements or the child command's output).
"""

import click


class Console:
    def write(self, text, nl=True):
        """Payload on stdout"""
        click.echo(text, nl=nl)

    def stream(self, chunk):
        click.echo(chunk, nl=False)

    def info(self, message):
        click.secho(f"✅ {message}", fg='green', err=True)

    def note(self, message):
        click.echo(message, err=True)

    def comment(self, message):
        click.secho(message, fg='yellow', err=True)

    def error(self, message):
        click.secho(f"❌ {message}", fg='red', err=True)
