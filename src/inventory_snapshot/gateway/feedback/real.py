"""Feedback implementations that write to stderr."""

import click

from inventory_snapshot.gateway.feedback.abc import UserFeedback


class InteractiveFeedback(UserFeedback):
    """Styled messages on stderr. Stdout stays free for machine-readable output."""

    def info(self, message: str) -> None:
        click.echo(message, err=True)

    def success(self, message: str) -> None:
        click.echo(click.style(message, fg="green"), err=True)

    def error(self, message: str) -> None:
        click.echo(click.style("Error: ", fg="red") + message, err=True)


class SuppressedFeedback(UserFeedback):
    """Quiet mode: only errors are shown."""

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        click.echo(click.style("Error: ", fg="red") + message, err=True)
