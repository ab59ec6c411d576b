"""
Terminal output helpers with colored symbols.
"""

import logging
from datetime import datetime
from typing import Sequence

import click

logger = logging.getLogger(__name__)


def info(message: str) -> None:
    click.echo(f"{click.style('ℹ', fg='blue')} {message}")


def success(message: str) -> None:
    click.echo(f"{click.style('✓', fg='green')} {message}")


def warn(message: str) -> None:
    click.echo(f"{click.style('⚠', fg='yellow')} {message}")


def error(message: str) -> None:
    click.echo(f"{click.style('✖', fg='red')} {message}", err=True)


def dry_run(message: str) -> None:
    click.echo(f"{click.style('[DRY RUN]', fg='cyan')} {message}")


def newline() -> None:
    click.echo("")


def short_id(resource_id: str) -> str:
    return f"{resource_id[:8]}..."


def format_date(value: str) -> str:
    """Format an ISO timestamp in local time, returning the input if unparseable."""
    if not value:
        return "Unknown date"
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Invalid date format: {value}")
        return value
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def describe(resource) -> str:
    """One-line summary: short id, optional label, date and author."""
    parts = [short_id(resource.id)]
    if resource.label:
        parts.append(resource.label)
    parts.append(format_date(resource.created_on))
    parts.append(resource.author)
    return " | ".join(parts)


def print_resources(resources: Sequence) -> None:
    """Print a numbered list, marking the active (first) entry."""
    newline()
    for index, resource in enumerate(resources):
        active = click.style(" (ACTIVE - cannot delete)", fg="yellow") if index == 0 else ""
        number = click.style(f"{index + 1}.", fg="bright_black")
        click.echo(f"  {number} {describe(resource)}{active}")
    newline()
