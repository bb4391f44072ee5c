"""Serialization of translated workflows."""

from dagwright.core.codec.workflow_xml import WorkflowXmlWriter, render_workflow_xml

__all__ = [
    'WorkflowXmlWriter',
    'render_workflow_xml',
]
