"""Interactive prompt helpers."""

from typing import Any, Callable, List, Optional, Sequence

import click

# Values that end an open-ended list prompt
DEFAULT_TERMINATORS = ("", "done")


def ask_text(text: str) -> str:
    """Ask for a free-form value; an empty answer is allowed."""
    return click.prompt(text, default="", show_default=False)


def ask_yes_no(text: str, default: bool = False) -> bool:
    """Ask a y/n question."""
    return click.confirm(text, default=default)


def is_terminator(value: str, terminators: Sequence[str] = DEFAULT_TERMINATORS) -> bool:
    """Check whether an answer ends a list prompt."""
    return value.strip() in terminators


def collect_until_done(
    ask: Callable[[int], str],
    follow_up: Optional[Callable[[str], Any]] = None,
    minimum: int = 0,
    terminators: Sequence[str] = DEFAULT_TERMINATORS,
) -> List[Any]:
    """
    Collect answers until the operator enters a terminator.

    Args:
        ask: Called with the 1-based number of the item being requested
        follow_up: Optional callable turning each accepted answer into the stored item
        minimum: Terminators are ignored until this many items were collected
        terminators: Answers that end the list

    Returns:
        List[Any]: Collected items in input order
    """
    items: List[Any] = []

    while True:
        answer = ask(len(items) + 1).strip()

        if is_terminator(answer, terminators):
            if len(items) >= minimum:
                return items
            continue

        items.append(follow_up(answer) if follow_up else answer)
