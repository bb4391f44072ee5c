"""Workflow assembly: transition wiring and synthetic terminal nodes."""

from dagwright.core.workflows.assembly import (
    AssembledGraph,
    AssembledNode,
    GraphAssembler,
    KillNode,
)

__all__ = [
    'AssembledGraph',
    'AssembledNode',
    'GraphAssembler',
    'KillNode',
]
