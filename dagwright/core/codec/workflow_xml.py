# dagwright/core/codec/workflow_xml.py
"""XML rendering of a translated workflow.

The workflow format allows a single ok-transition per action, so the writer
inserts control nodes where the DAG needs them:

- several ok targets: the transition goes to a fork (`<fork_prefix><source>`)
  with one path per target;
- a node reached by several ok-transitions (the end node included) is
  reached through a join (`<join_prefix><target>`).

Error transitions are written as they are. Output is deterministic.
"""

from __future__ import annotations

import dataclasses
import xml.etree.ElementTree as ET
from collections import Counter
from typing import Any

from dagwright.core.errors import (
    ErrorCode,
    StateError,
    ValidationReport,
    raise_collected,
)
from dagwright.core.logging import get_logger
from dagwright.core.mapping import FieldMapper, WorkflowTranslator, default_mapper
from dagwright.core.models.config import TranslationConfig
from dagwright.core.models.workflow import Workflow
from dagwright.core.schema import (
    ActionBodyElement,
    LauncherOption,
    WorkflowAppElement,
)

logger = get_logger('xml')

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


class _ControlNodes:
    """Fork and join nodes needed to express multi-target transitions."""

    def __init__(self, app: WorkflowAppElement, config: TranslationConfig) -> None:
        self._config = config
        joinable = {action.name for action in app.actions} | {app.end_name}

        incoming: Counter[str] = Counter(t for t in app.start_to if t in joinable)
        for action in app.actions:
            incoming.update(t for t in action.ok_to if t in joinable)

        # target -> join name, in first-reference order
        self.joins: dict[str, str] = {
            target: f'{config.join_prefix}{target}'
            for target, count in incoming.items()
            if count > 1
        }
        # source -> (fork name, paths)
        self.forks: dict[str, tuple[str, list[str]]] = {}

    def route(self, source: str, targets: list[str]) -> str:
        """Single transition target for *source*, creating a fork if needed."""
        paths: list[str] = []
        for target in targets:
            routed = self.joins.get(target, target)
            if routed not in paths:
                paths.append(routed)
        if len(paths) == 1:
            return paths[0]
        fork_name = f'{self._config.fork_prefix}{source}'
        self.forks[source] = (fork_name, paths)
        return fork_name


class WorkflowXmlWriter:
    """Renders a `WorkflowAppElement` as a workflow XML document."""

    def __init__(self, config: TranslationConfig | None = None) -> None:
        self.config = config or TranslationConfig()

    def write(self, app: WorkflowAppElement) -> str:
        root = self.to_element(app)
        if self.config.pretty_print:
            ET.indent(root, space='    ')
        # ElementTree takes the declared encoding from the locale for str output
        return XML_DECLARATION + ET.tostring(root, encoding='unicode') + '\n'

    def to_element(self, app: WorkflowAppElement) -> ET.Element:
        control = _ControlNodes(app, self.config)

        root = ET.Element('workflow-app', {'xmlns': app.xmlns, 'name': app.name})
        ET.SubElement(root, 'start', {'to': control.route('start', app.start_to)})
        self._append_fork(root, control, 'start')

        for action in app.actions:
            self._append_join(root, control, action.name)
            element = ET.SubElement(root, 'action', {'name': action.name})
            _append_body(element, action.body)
            ET.SubElement(element, 'ok', {'to': control.route(action.name, action.ok_to)})
            ET.SubElement(element, 'error', {'to': action.error_to})
            self._append_fork(root, control, action.name)

        for kill in app.kills:
            element = ET.SubElement(root, 'kill', {'name': kill.name})
            ET.SubElement(element, 'message').text = kill.message

        self._append_join(root, control, app.end_name)
        ET.SubElement(root, 'end', {'name': app.end_name})

        _check_names(root)
        logger.debug(
            f"rendered workflow '{app.name}' with {len(control.forks)} fork(s) "
            f'and {len(control.joins)} join(s)'
        )
        return root

    @staticmethod
    def _append_fork(root: ET.Element, control: _ControlNodes, source: str) -> None:
        if source not in control.forks:
            return
        fork_name, paths = control.forks[source]
        fork = ET.SubElement(root, 'fork', {'name': fork_name})
        for path in paths:
            ET.SubElement(fork, 'path', {'start': path})

    @staticmethod
    def _append_join(root: ET.Element, control: _ControlNodes, target: str) -> None:
        join_name = control.joins.get(target)
        if join_name is not None:
            ET.SubElement(root, 'join', {'name': join_name, 'to': target})


def render_workflow_xml(
    workflow: Workflow,
    config: TranslationConfig | None = None,
    mapper: FieldMapper | None = None,
) -> str:
    """Translate *workflow* and render it as an XML document."""
    config = config or TranslationConfig()
    app = WorkflowTranslator(mapper or default_mapper(), config).translate(workflow)
    return WorkflowXmlWriter(config).write(app)


# =============================================================================
# Record serialization
# =============================================================================


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def _xml_name(field: dataclasses.Field[Any]) -> str:
    return field.metadata.get('xml', field.name.replace('_', '-'))


def _append_body(parent: ET.Element, body: ActionBodyElement) -> None:
    attrs = {'xmlns': body.XMLNS} if body.XMLNS else {}
    element = ET.SubElement(parent, body.XML_TAG, attrs)
    _append_fields(element, body)


def _append_fields(element: ET.Element, record: Any) -> None:
    for field in dataclasses.fields(record):
        value = getattr(record, field.name)
        if value is None or value == []:
            continue
        tag = _xml_name(field)
        if field.metadata.get('attr'):
            element.set(tag, _text(value))
        elif value is False:
            # flag elements are written only when set
            continue
        elif field.metadata.get('inline'):
            for item in value:
                _append_inline(element, item)
        else:
            for item in value if isinstance(value, list) else [value]:
                _append_value(element, tag, item)


def _append_value(parent: ET.Element, tag: str, value: Any) -> None:
    child = ET.SubElement(parent, tag)
    if dataclasses.is_dataclass(value):
        _append_fields(child, value)
    elif value is not True:
        # True stays an empty flag element, e.g. <capture-output/>
        child.text = _text(value)


def _append_inline(parent: ET.Element, item: Any) -> None:
    if isinstance(item, LauncherOption):
        ET.SubElement(parent, item.kind).text = _text(item.value)
    else:
        _append_fields(parent, item)


def _check_names(root: ET.Element) -> None:
    """Synthetic fork/join names must not clash with other nodes."""
    report = ValidationReport('xml')
    seen: set[str] = set()
    for child in root:
        name = child.get('name')
        if name is None:
            continue
        if name in seen:
            report.add(
                StateError(
                    message=f"duplicate node name '{name}' in rendered document",
                    code=ErrorCode.DUPLICATE_NODE_NAME,
                    help_text='rename the node or change fork_prefix/join_prefix in TranslationConfig',
                )
            )
        seen.add(name)
    raise_collected(report)
