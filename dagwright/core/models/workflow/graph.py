"""Workflow: the validated node table of one DAG."""

from __future__ import annotations

import heapq
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Self

from dagwright.core.errors import (
    ErrorCode,
    StateError,
    ValidationError,
    ValidationReport,
    raise_collected,
)
from dagwright.core.logging import get_logger

from .error_handler import ErrorHandler
from .nodes import Node

logger = get_logger('graph')


# =============================================================================
# Workflow
# =============================================================================


@dataclass
class Workflow:
    """
    A named DAG of nodes, owned as a single node table.

    `nodes` is stored in a deterministic topological order: parents before
    children, ties broken by the order the nodes were given in. Edges are
    `(parent_index, child_index)` pairs into that table. Error handler
    nodes are not part of the table; they are reached through
    `Node.error_handler`.

    Usually created by `WorkflowBuilder`, which discovers the nodes from
    any node of the DAG.
    """

    name: str
    nodes: tuple[Node[Any], ...]
    _index: dict[int, int] = field(default_factory=lambda: {}, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate the node table, then order it.

        All problems are collected and raised together.
        """
        self.nodes = tuple(self.nodes)

        report = ValidationReport('workflow')
        for error in self._collect_table_errors():
            report.add(error)
        raise_collected(report)

        self.nodes = _topological_order(self.nodes)
        self._index = {id(node): i for i, node in enumerate(self.nodes)}

    def _collect_table_errors(self) -> list[ValidationError | StateError]:
        errors: list[ValidationError | StateError] = []

        if not self.name or not self.name.strip():
            errors.append(
                ValidationError(
                    message='workflow name must be a non-empty string',
                    code=ErrorCode.WORKFLOW_NO_NAME,
                )
            )
        if not self.nodes:
            errors.append(
                ValidationError(
                    message='workflow has no nodes',
                    code=ErrorCode.WORKFLOW_NO_NODES,
                    help_text='pass at least one node to WorkflowBuilder.with_dag_containing_node()',
                )
            )

        member_ids = {id(node) for node in self.nodes}
        seen_names: set[str] = set()
        for node in self.nodes:
            if node.is_error_handler:
                errors.append(
                    StateError(
                        message='error handler node used as a workflow node',
                        code=ErrorCode.ERROR_HANDLER_IN_DAG,
                        notes=[f"'{node.name}' is wrapped by an ErrorHandler"],
                        help_text='attach the handler with with_error_handler() instead',
                    )
                )
            if node.name in seen_names:
                errors.append(
                    StateError(
                        message=f"duplicate node name '{node.name}'",
                        code=ErrorCode.DUPLICATE_NODE_NAME,
                        help_text='each node must have a unique name within the workflow',
                    )
                )
            seen_names.add(node.name)
            for neighbour in (*node.parents, *node.children):
                if id(neighbour) not in member_ids:
                    errors.append(
                        StateError(
                            message='node is connected to a node outside the workflow',
                            code=ErrorCode.INVALID_PARENT,
                            notes=[f"'{node.name}' is connected to '{neighbour.name}'"],
                            help_text='build the workflow with WorkflowBuilder to include every connected node',
                        )
                    )
        return errors

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    @property
    def roots(self) -> tuple[Node[Any], ...]:
        """Nodes without parents, in table order."""
        return tuple(node for node in self.nodes if not node.parents)

    def index_of(self, node: Node[Any]) -> int:
        try:
            return self._index[id(node)]
        except KeyError:
            raise StateError(
                message=f"node '{node.name}' is not part of workflow '{self.name}'",
                code=ErrorCode.INVALID_PARENT,
            ) from None

    def node(self, name: str) -> Node[Any]:
        """Look up a node by name."""
        for node in self.nodes:
            if node.name == name:
                return node
        raise KeyError(name)

    def edges(self) -> list[tuple[int, int]]:
        """Dependency edges as (parent_index, child_index), parent-major order.

        Raises:
            StateError: a node gained a child outside the table after the
                workflow was built.
        """
        edges: list[tuple[int, int]] = []
        for i, node in enumerate(self.nodes):
            for child in node.children:
                j = self._index.get(id(child))
                if j is None:
                    raise StateError(
                        message='workflow is stale; rebuild it',
                        code=ErrorCode.INVALID_PARENT,
                        notes=[
                            f"'{child.name}' was built with parent '{node.name}' "
                            f"after workflow '{self.name}' was built",
                        ],
                        help_text='build the workflow again with WorkflowBuilder',
                    )
                edges.append((i, j))
        return edges

    def error_handlers(self) -> tuple[ErrorHandler, ...]:
        """Distinct handlers attached to the workflow's nodes, first use first."""
        seen: set[int] = set()
        handlers: list[ErrorHandler] = []
        for node in self.nodes:
            handler = node.error_handler
            if handler is not None and id(handler.handler_node) not in seen:
                seen.add(id(handler.handler_node))
                handlers.append(handler)
        return tuple(handlers)


def _topological_order(nodes: tuple[Node[Any], ...]) -> tuple[Node[Any], ...]:
    """Kahn's algorithm; among ready nodes the earliest given one goes first."""
    position = {id(node): i for i, node in enumerate(nodes)}
    in_degree = [len(node.parents) for node in nodes]

    ready = [i for i, degree in enumerate(in_degree) if degree == 0]
    heapq.heapify(ready)
    ordered: list[Node[Any]] = []

    while ready:
        i = heapq.heappop(ready)
        node = nodes[i]
        ordered.append(node)
        for child in node.children:
            j = position[id(child)]
            in_degree[j] -= 1
            if in_degree[j] == 0:
                heapq.heappush(ready, j)

    # Builders only accept existing nodes as parents, so no cycle can form.
    assert len(ordered) == len(nodes)
    return tuple(ordered)


# =============================================================================
# WorkflowBuilder
# =============================================================================


class WorkflowBuilder:
    """
    Collects a DAG from some of its nodes and builds a `Workflow`.

    Example:
        ```python
        workflow = (
            WorkflowBuilder()
            .with_name('nightly-load')
            .with_dag_containing_node(load)
            .build()
        )
        ```
    """

    def __init__(self) -> None:
        self._name: str | None = None
        self._seeds: list[Node[Any]] = []

    def with_name(self, name: str) -> Self:
        self._name = name
        return self

    def with_dag_containing_node(self, node: Node[Any]) -> Self:
        """Include *node* and every node connected to it."""
        if node.is_error_handler:
            raise StateError(
                message='error handler node used as a workflow node',
                code=ErrorCode.ERROR_HANDLER_IN_DAG,
                notes=[f"'{node.name}' is wrapped by an ErrorHandler"],
                help_text='attach the handler with with_error_handler() instead',
            )
        self._seeds.append(node)
        return self

    def build(self) -> Workflow:
        nodes = _discover(self._seeds)
        workflow = Workflow(name=self._name or '', nodes=nodes)
        logger.debug(
            f"workflow '{workflow.name}': {len(workflow.nodes)} node(s), "
            f'{len(workflow.roots)} root(s)'
        )
        return workflow


def _discover(seeds: list[Node[Any]]) -> tuple[Node[Any], ...]:
    """Breadth-first walk over parent and child edges, in declaration order."""
    seen: set[int] = set()
    found: list[Node[Any]] = []
    queue: deque[Node[Any]] = deque()
    for seed in seeds:
        if id(seed) not in seen:
            seen.add(id(seed))
            queue.append(seed)
        while queue:
            node = queue.popleft()
            found.append(node)
            for neighbour in (*node.parents, *node.children):
                if id(neighbour) not in seen:
                    seen.add(id(neighbour))
                    queue.append(neighbour)
    return tuple(found)
