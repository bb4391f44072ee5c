"""Target-schema records of the workflow document itself."""

from __future__ import annotations

from dataclasses import dataclass, field

from .actions import ActionBodyElement


@dataclass(kw_only=True)
class ActionElement:
    """An `<action>` with its body and transitions."""

    name: str
    body: ActionBodyElement
    ok_to: list[str]
    error_to: str


@dataclass(kw_only=True)
class KillElement:
    name: str
    message: str


@dataclass(kw_only=True)
class WorkflowAppElement:
    """
    The whole document. Every transition target names an action, kill or
    end element of the same document.
    """

    name: str
    xmlns: str
    start_to: list[str]
    actions: list[ActionElement] = field(default_factory=list)
    kills: list[KillElement] = field(default_factory=list)
    end_name: str = 'end'

    def action(self, name: str) -> ActionElement:
        for action in self.actions:
            if action.name == name:
                return action
        raise KeyError(name)
