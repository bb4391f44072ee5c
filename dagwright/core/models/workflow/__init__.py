"""Workflow graph models: nodes, builders, error handlers and the DAG."""

from dagwright.core.models.workflow.naming import (
    NODE_NAME_PATTERN,
    MAX_NODE_NAME_LENGTH,
    node_name_problem,
)
from dagwright.core.models.workflow.nodes import (
    Node,
    NodeBuilder,
    HadoopActionBuilder,
    HiveActionBuilder,
    ShellActionBuilder,
    SparkActionBuilder,
    JavaActionBuilder,
    EmailActionBuilder,
    PrepareBuilder,
    LauncherBuilder,
)
from dagwright.core.models.workflow.error_handler import ErrorHandler
from dagwright.core.models.workflow.graph import Workflow, WorkflowBuilder

__all__ = [
    # naming
    'NODE_NAME_PATTERN',
    'MAX_NODE_NAME_LENGTH',
    'node_name_problem',
    # nodes
    'Node',
    'NodeBuilder',
    'HadoopActionBuilder',
    'HiveActionBuilder',
    'ShellActionBuilder',
    'SparkActionBuilder',
    'JavaActionBuilder',
    'EmailActionBuilder',
    'PrepareBuilder',
    'LauncherBuilder',
    # error handler
    'ErrorHandler',
    # graph
    'Workflow',
    'WorkflowBuilder',
]
