"""Unit tests for Workflow and WorkflowBuilder."""

from __future__ import annotations

import pytest

from dagwright.core.errors import (
    ErrorCode,
    MultipleValidationErrors,
    StateError,
    ValidationError,
)
from dagwright.core.models.workflow import (
    ErrorHandler,
    Node,
    ShellActionBuilder,
    Workflow,
    WorkflowBuilder,
)

pytestmark = pytest.mark.unit


def _shell(name: str, *parents: Node, handler: ErrorHandler | None = None) -> Node:
    builder = ShellActionBuilder.create().with_name(name).with_executable(f'{name}.sh')
    for parent in parents:
        builder.with_parent(parent)
    if handler is not None:
        builder.with_error_handler(handler)
    return builder.build()


def _handler(name: str) -> ErrorHandler:
    return ErrorHandler.build_as_error_handler(
        ShellActionBuilder.create().with_name(name).with_executable('h.sh')
    )


def _build(name: str, *seeds: Node) -> Workflow:
    builder = WorkflowBuilder().with_name(name)
    for seed in seeds:
        builder.with_dag_containing_node(seed)
    return builder.build()


# =============================================================================
# Discovery and ordering
# =============================================================================


class TestDiscoveryAndOrder:
    """Tests for node discovery and topological ordering."""

    def test_diamond_from_leaf(self) -> None:
        a = _shell('a')
        b = _shell('b', a)
        c = _shell('c', a)
        d = _shell('d', b, c)

        workflow = _build('diamond', d)

        assert [n.name for n in workflow.nodes] == ['a', 'b', 'c', 'd']
        assert workflow.roots == (a,)
        assert workflow.edges() == [(0, 1), (0, 2), (1, 3), (2, 3)]

    def test_same_table_from_any_seed(self) -> None:
        a = _shell('a')
        b = _shell('b', a)
        c = _shell('c', a)

        names = [[n.name for n in _build('w', seed).nodes] for seed in (a, b, c)]
        assert names[0] == ['a', 'b', 'c']
        assert all(sorted(found) == ['a', 'b', 'c'] for found in names)

    def test_parents_precede_children(self) -> None:
        a = _shell('a')
        b = _shell('b', a)
        c = _shell('c', b)
        d = _shell('d', a, c)

        workflow = _build('w', d)
        position = {n.name: i for i, n in enumerate(workflow.nodes)}
        for parent_index, child_index in workflow.edges():
            assert parent_index < child_index
        assert position['a'] < position['b'] < position['c'] < position['d']

    def test_disconnected_components_keep_seed_order(self) -> None:
        x = _shell('x')
        y = _shell('y')
        workflow = _build('w', y, x)
        assert [n.name for n in workflow.nodes] == ['y', 'x']
        assert workflow.roots == (y, x)

    def test_seed_given_twice_is_counted_once(self) -> None:
        a = _shell('a')
        workflow = _build('w', a, a)
        assert workflow.nodes == (a,)

    def test_ordering_is_deterministic(self) -> None:
        a = _shell('a')
        _shell('b', a)
        _shell('c', a)
        first = [n.name for n in _build('w', a).nodes]
        second = [n.name for n in _build('w', a).nodes]
        assert first == second


# =============================================================================
# Queries
# =============================================================================


class TestQueries:
    def test_node_lookup(self) -> None:
        a = _shell('a')
        workflow = _build('w', a)
        assert workflow.node('a') is a
        with pytest.raises(KeyError):
            workflow.node('missing')

    def test_index_of_foreign_node(self) -> None:
        workflow = _build('w', _shell('a'))
        with pytest.raises(StateError) as exc_info:
            workflow.index_of(_shell('other'))
        assert exc_info.value.code == ErrorCode.INVALID_PARENT

    def test_edges_of_stale_workflow(self) -> None:
        a = _shell('a')
        workflow = _build('w', a)
        _shell('late', a)

        with pytest.raises(StateError) as exc_info:
            workflow.edges()
        assert exc_info.value.code == ErrorCode.INVALID_PARENT
        assert 'stale' in exc_info.value.message

    def test_error_handlers_are_distinct(self) -> None:
        shared = _handler('shared')
        other = _handler('other')
        a = _shell('a', handler=shared)
        b = _shell('b', a, handler=other)
        _shell('c', b, handler=shared)

        workflow = _build('w', a)
        assert [h.name for h in workflow.error_handlers()] == ['shared', 'other']

    def test_error_handler_nodes_not_in_table(self) -> None:
        handler = _handler('handler')
        a = _shell('a', handler=handler)
        workflow = _build('w', a)
        assert workflow.nodes == (a,)


# =============================================================================
# Validation
# =============================================================================


class TestValidation:
    def test_missing_name(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            WorkflowBuilder().with_dag_containing_node(_shell('a')).build()
        assert exc_info.value.code == ErrorCode.WORKFLOW_NO_NAME

    def test_no_nodes(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            Workflow(name='w', nodes=())
        assert exc_info.value.code == ErrorCode.WORKFLOW_NO_NODES

    def test_problems_collected_together(self) -> None:
        with pytest.raises(MultipleValidationErrors) as exc_info:
            Workflow(name='', nodes=())
        codes = {error.code for error in exc_info.value.report.errors}
        assert codes == {ErrorCode.WORKFLOW_NO_NAME, ErrorCode.WORKFLOW_NO_NODES}

    def test_duplicate_names(self) -> None:
        first = _shell('same')
        _shell('same', first)
        with pytest.raises(StateError) as exc_info:
            _build('w', first)
        assert exc_info.value.code == ErrorCode.DUPLICATE_NODE_NAME

    def test_partial_table_rejected(self) -> None:
        a = _shell('a')
        b = _shell('b', a)
        with pytest.raises(StateError) as exc_info:
            Workflow(name='w', nodes=(b,))
        assert exc_info.value.code == ErrorCode.INVALID_PARENT

    def test_handler_seed_rejected(self) -> None:
        handler = _handler('handler')
        with pytest.raises(StateError) as exc_info:
            WorkflowBuilder().with_dag_containing_node(handler.handler_node)
        assert exc_info.value.code == ErrorCode.ERROR_HANDLER_IN_DAG

    def test_handler_node_in_table_rejected(self) -> None:
        handler = _handler('handler')
        with pytest.raises(StateError) as exc_info:
            Workflow(name='w', nodes=(handler.handler_node,))
        assert exc_info.value.code == ErrorCode.ERROR_HANDLER_IN_DAG
