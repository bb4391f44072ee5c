"""dagwright - build validated workflow DAGs and render them as workflow XML"""

# Install Rust-style error handler on import
from .core.errors import install_error_handler as _install_error_handler

_install_error_handler()

from .core.errors import (
    ErrorCode,
    DagwrightError,
    ValidationError,
    StateError,
    MappingError,
    ConfigurationError,
    MultipleValidationErrors,
    ValidationReport,
)
from .core.models.actions import (
    Delete,
    Mkdir,
    Prepare,
    Launcher,
    Action,
    HadoopAction,
    HiveAction,
    ShellAction,
    SparkAction,
    JavaAction,
    EmailAction,
)
from .core.models.config import KillPolicy, TranslationConfig
from .core.models.workflow import (
    Node,
    NodeBuilder,
    HiveActionBuilder,
    ShellActionBuilder,
    SparkActionBuilder,
    JavaActionBuilder,
    EmailActionBuilder,
    PrepareBuilder,
    LauncherBuilder,
    ErrorHandler,
    Workflow,
    WorkflowBuilder,
)
from .core.workflows import AssembledGraph, AssembledNode, GraphAssembler, KillNode
from .core.mapping import FieldMapper, FieldRule, WorkflowTranslator, default_mapper
from .core.codec import WorkflowXmlWriter, render_workflow_xml

__all__ = [
    # Errors
    'ErrorCode',
    'DagwrightError',
    'ValidationError',
    'StateError',
    'MappingError',
    'ConfigurationError',
    'MultipleValidationErrors',
    'ValidationReport',
    # Actions
    'Delete',
    'Mkdir',
    'Prepare',
    'Launcher',
    'Action',
    'HadoopAction',
    'HiveAction',
    'ShellAction',
    'SparkAction',
    'JavaAction',
    'EmailAction',
    # Config
    'KillPolicy',
    'TranslationConfig',
    # Graph
    'Node',
    'NodeBuilder',
    'HiveActionBuilder',
    'ShellActionBuilder',
    'SparkActionBuilder',
    'JavaActionBuilder',
    'EmailActionBuilder',
    'PrepareBuilder',
    'LauncherBuilder',
    'ErrorHandler',
    'Workflow',
    'WorkflowBuilder',
    # Assembly
    'AssembledGraph',
    'AssembledNode',
    'GraphAssembler',
    'KillNode',
    # Mapping / rendering
    'FieldMapper',
    'FieldRule',
    'WorkflowTranslator',
    'default_mapper',
    'WorkflowXmlWriter',
    'render_workflow_xml',
]
