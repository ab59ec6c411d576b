"""
Interactive prompts for choosing and confirming deletions.
"""

from typing import List, Sequence

import click

from .api.models import ResourceKind
from .output import print_resources


def parse_selection(text: str, count: int) -> List[int]:
    """
    Parse a selection like "2,4-6" or "all" into 0-based list positions.

    Position 1 (the active resource) is never selectable.

    Raises:
        click.BadParameter: on malformed input or out-of-range numbers
    """
    text = text.strip().lower()
    if not text:
        return []
    if text == "all":
        return list(range(1, count))

    positions = []
    for part in text.replace(" ", "").split(","):
        if not part:
            continue
        try:
            if "-" in part:
                start, end = (int(p) for p in part.split("-", 1))
            else:
                start = end = int(part)
        except ValueError:
            raise click.BadParameter(f"Invalid selection: {part}")

        if start > end:
            start, end = end, start
        if start < 1 or end > count:
            raise click.BadParameter(f"Selection out of range: {part} (valid: 2-{count})")
        if start == 1:
            raise click.BadParameter("Entry 1 is the active resource and cannot be deleted")
        positions.extend(range(start - 1, end))

    return list(dict.fromkeys(positions))


def choose_subset(resources: Sequence, kind: ResourceKind) -> List:
    """Display the resources and let the user pick which to delete."""
    if len(resources) <= 1:
        return []

    print_resources(resources)
    positions = click.prompt(
        f"Select {kind.plural} to delete (e.g. 2,4-6 or 'all'; empty for none)",
        default="",
        show_default=False,
        value_proc=lambda text: parse_selection(text, len(resources)),
    )
    return [resources[i] for i in positions]


def confirm_deletion(count: int, kind: ResourceKind, *, all_selected: bool = False, force: bool = False) -> bool:
    """Ask for confirmation unless `force` is set."""
    if force:
        return True

    scope = f"ALL {count} non-active" if all_selected else str(count)
    if kind is ResourceKind.VERSION:
        consequence = (
            "This will remove all preview URLs permanently."
            if all_selected
            else "This will remove their preview URLs permanently."
        )
    else:
        consequence = "This action cannot be undone."

    message = f"You are about to delete {scope} {kind.noun}(s). {consequence} Continue?"
    return click.confirm(click.style(message, fg="red"), default=False)
