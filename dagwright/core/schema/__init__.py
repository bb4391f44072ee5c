"""Records of the target workflow schema, filled in by the mapping engine."""

from dagwright.core.schema.common import (
    DeleteElement,
    MkdirElement,
    PrepareElement,
    LauncherOption,
    LauncherElement,
    PropertyElement,
    ConfigurationElement,
)
from dagwright.core.schema.actions import (
    ActionBodyElement,
    HiveElement,
    ShellElement,
    SparkElement,
    JavaElement,
    EmailElement,
)
from dagwright.core.schema.workflow import (
    ActionElement,
    KillElement,
    WorkflowAppElement,
)

__all__ = [
    'DeleteElement',
    'MkdirElement',
    'PrepareElement',
    'LauncherOption',
    'LauncherElement',
    'PropertyElement',
    'ConfigurationElement',
    'ActionBodyElement',
    'HiveElement',
    'ShellElement',
    'SparkElement',
    'JavaElement',
    'EmailElement',
    'ActionElement',
    'KillElement',
    'WorkflowAppElement',
]
