"""Graph assembly: wires transitions and injects synthetic kill nodes.

Turns a `Workflow` into a flat, ordered list of nodes that each know where
they go on success (ok) and on failure (error):

- an ordinary node's ok-transitions are its children, or the end node if it
  has none;
- its error-transition is its attached error handler, or the kill node;
- both transitions of an error handler node lead to the kill node.

Kill nodes are created the first time something needs them and reused
afterwards (see `KillPolicy` for sharing across handlers).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from dagwright.core.errors import (
    ErrorCode,
    StateError,
    ValidationReport,
    raise_collected,
)
from dagwright.core.logging import get_logger
from dagwright.core.models.config import TranslationConfig
from dagwright.core.models.workflow import ErrorHandler, Node, Workflow

logger = get_logger('assembly')


@dataclass(frozen=True)
class AssembledNode:
    """A workflow node with its resolved transitions."""

    node: Node[Any]
    ok_to: tuple[str, ...]
    error_to: str
    is_error_handler: bool = False

    @property
    def name(self) -> str:
        return self.node.name


@dataclass(frozen=True)
class KillNode:
    """Synthetic terminal node that ends the workflow as failed."""

    name: str
    message: str


@dataclass(frozen=True)
class AssembledGraph:
    """Output of `GraphAssembler.assemble()`: every node in emission order."""

    name: str
    start_to: tuple[str, ...]
    nodes: tuple[AssembledNode, ...]
    kill_nodes: tuple[KillNode, ...]
    end_name: str

    def node(self, name: str) -> AssembledNode:
        for assembled in self.nodes:
            if assembled.name == name:
                return assembled
        raise KeyError(name)

    @property
    def node_names(self) -> tuple[str, ...]:
        """All names defined in the document, synthetic ones included."""
        return (
            *(n.name for n in self.nodes),
            *(k.name for k in self.kill_nodes),
            self.end_name,
        )


class GraphAssembler:
    """Resolves transitions of a workflow. Holds no state between calls."""

    def __init__(self, config: TranslationConfig | None = None) -> None:
        self.config = config or TranslationConfig()

    def assemble(self, workflow: Workflow) -> AssembledGraph:
        kills: dict[str, KillNode] = {}

        def kill_target(handler_name: str | None) -> str:
            kill_name = self.config.kill_name_for(handler_name)
            if kill_name not in kills:
                kills[kill_name] = KillNode(kill_name, self.config.kill_message)
                logger.debug(f"workflow '{workflow.name}': created kill node '{kill_name}'")
            return kill_name

        assembled: list[AssembledNode] = []
        for node in workflow.nodes:
            ok_to = tuple(child.name for child in node.children) or (
                self.config.end_node_name,
            )
            handler = node.error_handler
            error_to = handler.name if handler is not None else kill_target(None)
            assembled.append(AssembledNode(node=node, ok_to=ok_to, error_to=error_to))

        for handler in workflow.error_handlers():
            assembled.append(self._assemble_handler(handler, kill_target(handler.name)))

        graph = AssembledGraph(
            name=workflow.name,
            start_to=tuple(root.name for root in workflow.roots),
            nodes=tuple(assembled),
            kill_nodes=tuple(kills.values()),
            end_name=self.config.end_node_name,
        )
        _check_graph(graph)
        return graph

    @staticmethod
    def _assemble_handler(handler: ErrorHandler, kill_name: str) -> AssembledNode:
        return AssembledNode(
            node=handler.handler_node,
            ok_to=(kill_name,),
            error_to=kill_name,
            is_error_handler=True,
        )


def _check_graph(graph: AssembledGraph) -> None:
    """Names must be unique and every transition must resolve."""
    report = ValidationReport('assembly')

    seen: set[str] = set()
    for name in graph.node_names:
        if name in seen:
            report.add(
                StateError(
                    message=f"duplicate node name '{name}'",
                    code=ErrorCode.DUPLICATE_NODE_NAME,
                    notes=[
                        'error handler, kill and end node names share one namespace '
                        'with the workflow nodes',
                    ],
                    help_text='rename the node or change the synthetic node names in TranslationConfig',
                )
            )
        seen.add(name)

    transitions = [('start', target) for target in graph.start_to]
    for node in graph.nodes:
        transitions.extend((node.name, target) for target in node.ok_to)
        transitions.append((node.name, node.error_to))
    for source, target in transitions:
        if target not in seen:
            report.add(
                StateError(
                    message=f"transition from '{source}' to unknown node '{target}'",
                    code=ErrorCode.DANGLING_TRANSITION,
                )
            )

    raise_collected(report)
