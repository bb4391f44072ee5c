# dagwright/core/models/config.py
from __future__ import annotations

from enum import Enum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dagwright.core.errors import (
    ConfigurationError,
    ErrorCode,
    ValidationReport,
    raise_collected,
)
from dagwright.core.models.workflow.naming import NODE_NAME_PATTERN

DEFAULT_KILL_MESSAGE = (
    'Action failed, error message[${wf:errorMessage(wf:lastErrorNode())}]'
)


class KillPolicy(str, Enum):
    """How synthetic kill nodes are shared across error handlers."""

    SHARED = 'shared'
    """One kill node per workflow (default)"""

    PER_HANDLER = 'per_handler'
    """One kill node per error handler, named '<kill_node_name>-<handler>'"""


class TranslationConfig(BaseModel):
    """
    Configuration for assembling and rendering a workflow definition.

    Node names configured here end up in the generated document next to
    user node names, so they follow the same naming rules.
    """

    model_config = ConfigDict(frozen=True)

    workflow_xmlns: str = Field(
        default='uri:oozie:workflow:1.0',
        description='Namespace of the workflow-app element',
    )
    kill_node_name: str = Field(default='kill')
    kill_message: str = Field(default=DEFAULT_KILL_MESSAGE)
    kill_policy: KillPolicy = KillPolicy.SHARED
    end_node_name: str = Field(default='end')
    fork_prefix: str = Field(
        default='fork-',
        description='Prefix of synthetic fork nodes inserted by the XML writer',
    )
    join_prefix: str = Field(
        default='join-',
        description='Prefix of synthetic join nodes inserted by the XML writer',
    )
    pretty_print: bool = True

    @model_validator(mode='after')
    def validate_names(self) -> Self:
        """Collects all independent naming errors and raises them together."""
        report = ValidationReport('config')

        for field_name in ('kill_node_name', 'end_node_name'):
            value: str = getattr(self, field_name)
            if NODE_NAME_PATTERN.fullmatch(value) is None:
                report.add(
                    ConfigurationError(
                        message=f'{field_name} is not a valid node name',
                        code=ErrorCode.CONFIG_INVALID_NAME,
                        notes=[f"{field_name}='{value}'"],
                        help_text='node names must match pattern: [A-Za-z0-9_\\-:.]+',
                    )
                )

        if self.kill_node_name == self.end_node_name:
            report.add(
                ConfigurationError(
                    message='kill_node_name and end_node_name must differ',
                    code=ErrorCode.CONFIG_NAME_CONFLICT,
                    notes=[f"both are '{self.kill_node_name}'"],
                )
            )

        for field_name in ('fork_prefix', 'join_prefix'):
            value = getattr(self, field_name)
            if not value or NODE_NAME_PATTERN.fullmatch(value) is None:
                report.add(
                    ConfigurationError(
                        message=f'{field_name} must be a non-empty node name prefix',
                        code=ErrorCode.CONFIG_INVALID_NAME,
                        notes=[f"{field_name}='{value}'"],
                    )
                )

        if self.fork_prefix and self.fork_prefix == self.join_prefix:
            report.add(
                ConfigurationError(
                    message='fork_prefix and join_prefix must differ',
                    code=ErrorCode.CONFIG_NAME_CONFLICT,
                    notes=[f"both are '{self.fork_prefix}'"],
                )
            )

        raise_collected(report)
        return self

    def kill_name_for(self, handler_name: str | None) -> str:
        """Name of the kill node targeted by *handler_name*'s transitions."""
        if self.kill_policy is KillPolicy.PER_HANDLER and handler_name is not None:
            return f'{self.kill_node_name}-{handler_name}'
        return self.kill_node_name
