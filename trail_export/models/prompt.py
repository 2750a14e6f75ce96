"""Confirmation prompt capability.

The host application supplies an async ``confirm(options) -> bool``
(a modal dialog in a browser, a terminal question in a CLI).  Prompts
are optional: when no capability is supplied the exporter skips every
question and proceeds with its defaults.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PromptOptions:
    """Text of a confirmation prompt.

    Attributes:
        title: Dialog title.
        message: Question or information shown to the user.
        confirm_label: Label of the affirmative button.
        cancel_label: Label of the negative button; ``None`` for a
            purely informational prompt with a single button.
    """

    title: str
    message: str
    confirm_label: str = "OK"
    cancel_label: str | None = "Cancel"


ConfirmPrompt = Callable[[PromptOptions], Awaitable[bool]]
