"""
Content panel - scene text and choice controls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from visual_novel.story.records import Choice


@dataclass
class ChoiceControl:
    """A rendered choice, bound to its target scene."""

    label: str
    target: str
    on_select: Callable[[str], object] = field(repr=False, default=lambda target: None)

    @classmethod
    def bind(cls, choice: Choice, on_select: Callable[[str], object]) -> "ChoiceControl":
        return cls(label=choice.label, target=choice.target, on_select=on_select)

    def select(self) -> object:
        """Activate the control (re-enters the sequencer)."""
        return self.on_select(self.target)


class ContentPanel:
    """Text and choices of the current scene, plus reveal state.

    Reveal listeners are called each time the panel goes from hidden to
    revealed.
    """

    def __init__(self):
        self.text = ""
        self.choices: list[ChoiceControl] = []
        self._revealed = False
        self._listeners: list[Callable[["ContentPanel"], None]] = []

    @property
    def revealed(self) -> bool:
        return self._revealed

    def hide(self) -> None:
        self._revealed = False

    def reveal(self) -> None:
        if self._revealed:
            return
        self._revealed = True
        for listener in list(self._listeners):
            listener(self)

    def add_reveal_listener(self, listener: Callable[["ContentPanel"], None]) -> None:
        self._listeners.append(listener)

    def remove_reveal_listener(self, listener: Callable[["ContentPanel"], None]) -> None:
        self._listeners.remove(listener)

    def clear_choices(self) -> None:
        self.choices = []

    def add_choice(self, control: ChoiceControl) -> None:
        self.choices.append(control)

    def select(self, index: int) -> object:
        """Select a choice by position."""
        return self.choices[index].select()


__all__ = ["ChoiceControl", "ContentPanel"]
