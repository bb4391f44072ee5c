"""Mapping engine: action payloads to workflow schema records."""

from dagwright.core.mapping.mapper import FieldMapper, FieldRule
from dagwright.core.mapping.rules import (
    LAUNCHER_OPTION_ORDER,
    config_to_element,
    default_mapper,
    launcher_to_element,
)
from dagwright.core.mapping.translator import WorkflowTranslator

__all__ = [
    'FieldMapper',
    'FieldRule',
    'LAUNCHER_OPTION_ORDER',
    'config_to_element',
    'default_mapper',
    'launcher_to_element',
    'WorkflowTranslator',
]
