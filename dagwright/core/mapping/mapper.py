"""Field-copying mapper from action payloads to target-schema records.

Sources are pydantic models, targets are dataclasses. For every registered
(source type, target type) pair the mapper copies each set source field to
the target field with the same name, unless a `FieldRule` renames or
converts it. Nested models and lists of models are mapped through their own
registered pairs. A whole pair can instead be handled by one `convert`
function when the shapes differ structurally (e.g. launcher options).

Nothing is dropped silently: a set source field without a target field,
a list copied into a scalar field, or a required target field left without
a value raises `MappingError` naming the field.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel

from dagwright.core.errors import ErrorCode, MappingError

TargetT = TypeVar('TargetT')


@dataclass(frozen=True)
class FieldRule:
    """Copies source field `source` into target field `target`, optionally converted."""

    source: str
    target: str
    convert: Callable[[Any], Any] | None = None


@dataclass(frozen=True)
class _Registration:
    target_type: type[Any]
    rules: Mapping[str, FieldRule]
    convert: Callable[[Any], Any] | None = None


def _is_unset(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (tuple, list, dict)) and not value:
        return True
    return False


def _is_repeated(target_field: dataclasses.Field[Any]) -> bool:
    return target_field.default_factory is list


def _is_required(target_field: dataclasses.Field[Any]) -> bool:
    return (
        target_field.default is dataclasses.MISSING
        and target_field.default_factory is dataclasses.MISSING
    )


class FieldMapper:
    """
    Maps source records to target records using registered pairs.

    The mapper keeps no state beyond its registrations, so mapping the same
    source twice yields equal targets. Pass it explicitly to whatever needs
    it; `default_mapper()` builds one with the standard action rules.
    """

    def __init__(self) -> None:
        self._registry: dict[type[Any], _Registration] = {}

    def register(
        self,
        source_type: type[BaseModel],
        target_type: type[Any],
        rules: Iterable[FieldRule] = (),
        *,
        convert: Callable[[Any], Any] | None = None,
    ) -> None:
        """Register how *source_type* maps to *target_type*.

        With *convert*, the whole source record is passed to it and its
        result is the target; *rules* are ignored.
        """
        if not dataclasses.is_dataclass(target_type):
            raise TypeError(f'{target_type.__name__} is not a dataclass')
        self._registry[source_type] = _Registration(
            target_type=target_type,
            rules={rule.source: rule for rule in rules},
            convert=convert,
        )

    def target_type_for(self, source: BaseModel) -> type[Any]:
        return self._registration(type(source)).target_type

    def map(self, source: BaseModel) -> Any:
        """Map *source* to its registered target type."""
        return self.copy_fields(source, self.target_type_for(source))

    def copy_fields(self, source: BaseModel, target_type: type[TargetT]) -> TargetT:
        """Create a *target_type* record populated from *source*.

        Raises:
            MappingError: a field could not be copied, or *target_type* is not
                the registered target of *source*'s type.
        """
        registration = self._registration(type(source))
        if registration.target_type is not target_type:
            raise MappingError(
                message=f'{type(source).__name__} does not map to {target_type.__name__}',
                code=ErrorCode.MAPPING_NO_TARGET,
                notes=[f'registered target: {registration.target_type.__name__}'],
            )
        if registration.convert is not None:
            return registration.convert(source)  # type: ignore[no-any-return]

        target_fields = {f.name: f for f in dataclasses.fields(target_type)}  # type: ignore[arg-type]
        values: dict[str, Any] = {}

        for field_name in type(source).model_fields:
            value = getattr(source, field_name)
            if _is_unset(value):
                continue
            rule = registration.rules.get(field_name)
            target_name = rule.target if rule is not None else field_name
            target_field = target_fields.get(target_name)
            if target_field is None:
                raise MappingError(
                    message=(
                        f"field '{field_name}' of {type(source).__name__} has no "
                        f'counterpart in {target_type.__name__}'
                    ),
                    code=ErrorCode.MAPPING_UNKNOWN_FIELD,
                    field_name=field_name,
                    help_text='register a FieldRule for it',
                )
            if rule is not None and rule.convert is not None:
                values[target_name] = rule.convert(value)
            else:
                values[target_name] = self._copy_value(
                    field_name, value, target_field, type(source)
                )

        for target_name, target_field in target_fields.items():
            if _is_required(target_field) and target_name not in values:
                raise MappingError(
                    message=(
                        f"required field '{target_name}' of {target_type.__name__} "
                        'has no source value'
                    ),
                    code=ErrorCode.MAPPING_MISSING_REQUIRED,
                    field_name=target_name,
                )

        return target_type(**values)

    # ------------------------------------------------------------------ #

    def _registration(self, source_type: type[Any]) -> _Registration:
        try:
            return self._registry[source_type]
        except KeyError:
            raise MappingError(
                message=f'no target registered for {source_type.__name__}',
                code=ErrorCode.MAPPING_NO_TARGET,
                help_text='register the pair with FieldMapper.register()',
            ) from None

    def _copy_value(
        self,
        field_name: str,
        value: Any,
        target_field: dataclasses.Field[Any],
        source_type: type[Any],
    ) -> Any:
        is_sequence = isinstance(value, (tuple, list))
        if is_sequence != _is_repeated(target_field):
            raise MappingError(
                message=(
                    f"field '{field_name}' of {source_type.__name__} is "
                    f"{'repeated' if is_sequence else 'single-valued'} but "
                    f"'{target_field.name}' is not"
                ),
                code=ErrorCode.MAPPING_INCOMPATIBLE_VALUE,
                field_name=field_name,
            )
        if is_sequence:
            return [self._copy_item(item) for item in value]
        if isinstance(value, Mapping):
            raise MappingError(
                message=f"field '{field_name}' of {source_type.__name__} needs a converter",
                code=ErrorCode.MAPPING_INCOMPATIBLE_VALUE,
                field_name=field_name,
                help_text='register a FieldRule with convert= for key/value fields',
            )
        return self._copy_item(value)

    def _copy_item(self, item: Any) -> Any:
        if isinstance(item, BaseModel):
            return self.map(item)
        return item
