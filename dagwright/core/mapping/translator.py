"""Translation of an assembled workflow into target-schema records."""

from __future__ import annotations

from dagwright.core.errors import ErrorCode, MappingError
from dagwright.core.logging import get_logger
from dagwright.core.models.config import TranslationConfig
from dagwright.core.models.workflow import Workflow
from dagwright.core.schema import (
    ActionBodyElement,
    ActionElement,
    KillElement,
    WorkflowAppElement,
)
from dagwright.core.workflows.assembly import AssembledNode, GraphAssembler

from .mapper import FieldMapper

logger = get_logger('translator')


class WorkflowTranslator:
    """
    Builds a `WorkflowAppElement` from a `Workflow`.

    The mapper is injected so callers control which action kinds are known.
    """

    def __init__(
        self,
        mapper: FieldMapper,
        config: TranslationConfig | None = None,
    ) -> None:
        self.mapper = mapper
        self.config = config or TranslationConfig()
        self._assembler = GraphAssembler(self.config)

    def translate(self, workflow: Workflow) -> WorkflowAppElement:
        graph = self._assembler.assemble(workflow)

        actions = [self._translate_node(node) for node in graph.nodes]
        kills = [KillElement(name=k.name, message=k.message) for k in graph.kill_nodes]

        logger.info(
            f"translated workflow '{graph.name}': {len(actions)} action(s), "
            f'{len(kills)} kill node(s)'
        )
        return WorkflowAppElement(
            name=graph.name,
            xmlns=self.config.workflow_xmlns,
            start_to=list(graph.start_to),
            actions=actions,
            kills=kills,
            end_name=graph.end_name,
        )

    def _translate_node(self, assembled: AssembledNode) -> ActionElement:
        try:
            body = self.mapper.map(assembled.node.action)
        except MappingError as exc:
            exc.with_note(f"while translating node '{assembled.name}'")
            raise
        if not isinstance(body, ActionBodyElement):
            raise MappingError(
                message=(
                    f"action of node '{assembled.name}' mapped to "
                    f'{type(body).__name__}, which is not an action element'
                ),
                code=ErrorCode.MAPPING_NO_TARGET,
            )
        return ActionElement(
            name=assembled.name,
            body=body,
            ok_to=list(assembled.ok_to),
            error_to=assembled.error_to,
        )
