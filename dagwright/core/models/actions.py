"""Action payload records owned by workflow nodes.

Payloads are frozen pydantic models. Builders stage plain values and hand
them to `build_model()`, which turns pydantic's validation errors into
dagwright `ValidationError`s naming the offending field.
"""

from __future__ import annotations

from typing import Any, ClassVar, Self, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, model_validator

from dagwright.core.errors import (
    DagwrightError,
    ErrorCode,
    MultipleValidationErrors,
    ValidationError,
    ValidationReport,
    raise_collected,
)

ModelT = TypeVar('ModelT', bound=BaseModel)


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')


# =============================================================================
# Prepare / Launcher
# =============================================================================


class Delete(_Record):
    """A path removed before the action starts."""

    path: str = Field(min_length=1)
    skip_trash: bool | None = None


class Mkdir(_Record):
    """A directory created before the action starts."""

    path: str = Field(min_length=1)


class Prepare(_Record):
    """Filesystem steps run before the action, deletes first."""

    deletes: tuple[Delete, ...] = ()
    mkdirs: tuple[Mkdir, ...] = ()


class Launcher(_Record):
    """
    Settings of the launcher job that starts the action.

    Unset options are left out of the generated document.
    """

    memory_mb: int | None = Field(default=None, gt=0)
    vcores: int | None = Field(default=None, gt=0)
    java_opts: str | None = None
    env: str | None = None
    queue: str | None = None
    sharelib: str | None = None
    view_acl: str | None = None
    modify_acl: str | None = None


# =============================================================================
# Actions
# =============================================================================


class Action(_Record):
    """Base class of all action payloads."""

    action_type: ClassVar[str] = 'action'


class HadoopAction(Action):
    """Attributes shared by actions that run on the cluster."""

    resource_manager: str | None = None
    name_node: str | None = None
    prepare: Prepare | None = None
    launcher: Launcher | None = None
    job_xmls: tuple[str, ...] = ()
    config: dict[str, str] = Field(default_factory=dict)
    files: tuple[str, ...] = ()
    archives: tuple[str, ...] = ()


class HiveAction(HadoopAction):
    action_type: ClassVar[str] = 'hive'

    script: str | None = None
    query: str | None = None
    params: tuple[str, ...] = ()
    args: tuple[str, ...] = ()

    @model_validator(mode='after')
    def validate_script_or_query(self) -> Self:
        if (self.script is None) == (self.query is None):
            raise ValidationError(
                message='hive action needs exactly one of script or query',
                code=ErrorCode.ACTION_INVALID_FIELD,
                notes=[f'script={self.script!r}', f'query={self.query!r}'],
                help_text='call with_script() or with_query(), not both',
            )
        return self


class ShellAction(HadoopAction):
    action_type: ClassVar[str] = 'shell'

    executable: str = Field(min_length=1)
    args: tuple[str, ...] = ()
    env_vars: tuple[str, ...] = ()
    capture_output: bool = False


class SparkAction(HadoopAction):
    action_type: ClassVar[str] = 'spark'

    master: str = Field(min_length=1)
    mode: str | None = None
    action_name: str = Field(min_length=1)
    action_class: str | None = None
    jar: str = Field(min_length=1)
    spark_opts: str | None = None
    args: tuple[str, ...] = ()


class JavaAction(HadoopAction):
    action_type: ClassVar[str] = 'java'

    main_class: str = Field(min_length=1)
    java_opts: tuple[str, ...] = ()
    args: tuple[str, ...] = ()
    capture_output: bool = False


class EmailAction(Action):
    action_type: ClassVar[str] = 'email'

    to: tuple[str, ...] = ()
    cc: tuple[str, ...] = ()
    bcc: tuple[str, ...] = ()
    subject: str
    body: str
    content_type: str | None = None
    attachment: str | None = None

    @model_validator(mode='after')
    def validate_recipients(self) -> Self:
        report = ValidationReport('email')
        if not self.to:
            report.add(
                ValidationError(
                    message='email action needs at least one recipient',
                    code=ErrorCode.ACTION_MISSING_FIELD,
                    notes=["field 'to' is empty"],
                    help_text='call with_recipient()',
                )
            )
        for address in (*self.to, *self.cc, *self.bcc):
            if ',' in address:
                report.add(
                    ValidationError(
                        message='email address must not contain commas',
                        code=ErrorCode.ACTION_INVALID_FIELD,
                        notes=[f"address '{address}'"],
                        help_text='add each recipient separately',
                    )
                )
        raise_collected(report)
        return self


# =============================================================================
# Validation helpers
# =============================================================================


def _field_path(loc: tuple[int | str, ...]) -> str:
    return '.'.join(str(part) for part in loc) or '<model>'


def collect_model_errors(
    model_cls: type[ModelT],
    data: dict[str, Any],
    report: ValidationReport,
) -> ModelT | None:
    """Validate *data* as *model_cls*, adding every problem to *report*.

    Returns the model, or None when validation failed.
    """
    try:
        return model_cls(**data)
    except pydantic.ValidationError as exc:
        for err in exc.errors():
            field_path = _field_path(err['loc'])
            missing = err['type'] == 'missing'
            report.add(
                ValidationError(
                    message=(
                        f"missing required field '{field_path}'"
                        if missing
                        else f"invalid value for field '{field_path}'"
                    ),
                    code=(
                        ErrorCode.ACTION_MISSING_FIELD
                        if missing
                        else ErrorCode.ACTION_INVALID_FIELD
                    ),
                    notes=[f'{model_cls.__name__}: {err["msg"]}'],
                )
            )
    except MultipleValidationErrors as exc:
        for error in exc.report.errors:
            report.add(error)
    except DagwrightError as exc:
        report.add(exc)
    return None


def build_model(model_cls: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate *data* as *model_cls* or raise the collected dagwright errors."""
    report = ValidationReport(model_cls.__name__)
    model = collect_model_errors(model_cls, data, report)
    raise_collected(report)
    assert model is not None
    return model
