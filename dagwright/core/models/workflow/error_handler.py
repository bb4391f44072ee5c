"""Error handler: an isolated node run on an action's failure path."""

from __future__ import annotations

from typing import Any

from dagwright.core.errors import ErrorCode, StateError

from .nodes import Node, NodeBuilder

# Only ErrorHandler.build_as_error_handler() holds this token
_HANDLER_TOKEN = object()


class ErrorHandler:
    """
    Wraps a node that has no parents and no children, for use as the
    failure-path target of other nodes.

    Created by `build_as_error_handler()` only, so the wrapped node is always
    fresh and can never be part of a workflow's node table. The handler knows
    nothing about the nodes it gets attached to; attach it with
    `NodeBuilder.with_error_handler()`. One handler may serve several nodes.

    Example:
        ```python
        notify = ErrorHandler.build_as_error_handler(
            EmailActionBuilder.create()
            .with_name('notify-failure')
            .with_recipient('ops@example.com')
            .with_subject('load failed')
            .with_body('see logs'),
        )
        load = HiveActionBuilder.create().with_name('load') \\
            .with_script('load.q').with_error_handler(notify).build()
        ```
    """

    __slots__ = ('_handler_node',)

    def __init__(self, handler_node: Node[Any], *, _token: object = None) -> None:
        if _token is not _HANDLER_TOKEN:
            raise StateError(
                message='error handlers can only be created by build_as_error_handler()',
                code=ErrorCode.ERROR_HANDLER_HAS_EDGES,
                notes=[f"tried to wrap existing node '{handler_node.name}'"],
                help_text='pass a fresh builder to ErrorHandler.build_as_error_handler()',
            )
        if handler_node.parents or handler_node.children:
            raise StateError(
                message='error handler nodes cannot have parents or children',
                code=ErrorCode.ERROR_HANDLER_HAS_EDGES,
                notes=[
                    f"node '{handler_node.name}' has "
                    f'{len(handler_node.parents)} parent(s) and '
                    f'{len(handler_node.children)} child(ren)',
                ],
            )
        handler_node._mark_error_handler()
        self._handler_node = handler_node

    @classmethod
    def build_as_error_handler(cls, builder: NodeBuilder[Any]) -> ErrorHandler:
        """
        Build the handler's node from *builder* and wrap it.

        The builder must declare no parents and no error handler of its own.
        Both are checked before building, so a rejected builder stays
        unconsumed and no node or edge is created.

        Raises:
            StateError: the builder declared parents or an error handler.
            ValidationError: the builder's configuration is invalid.
        """
        if builder.parents:
            raise StateError(
                message='error handler nodes cannot have parents or children',
                code=ErrorCode.ERROR_HANDLER_HAS_EDGES,
                notes=[
                    'parents declared on the builder: '
                    + ', '.join(f"'{p.name}'" for p in builder.parents),
                ],
                help_text='remove the with_parent() calls from the error handler builder',
            )
        if builder.error_handler is not None:
            raise StateError(
                message='error handler nodes cannot have an error handler',
                code=ErrorCode.ERROR_HANDLER_HAS_EDGES,
                notes=[
                    f"the builder is attached to '{builder.error_handler.name}'",
                    'both transitions of an error handler lead to the kill node',
                ],
                help_text='remove the with_error_handler() call from the error handler builder',
            )
        return cls(builder.build(), _token=_HANDLER_TOKEN)

    @property
    def name(self) -> str:
        """Name of the handler node."""
        return self._handler_node.name

    @property
    def handler_node(self) -> Node[Any]:
        return self._handler_node

    def __repr__(self) -> str:
        return f'ErrorHandler(name={self.name!r})'
