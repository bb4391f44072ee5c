"""DAG node type and the builders that create nodes."""

from __future__ import annotations

from abc import ABC
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Generic,
    Self,
    TypeVar,
)

from dagwright.core.errors import (
    ErrorCode,
    StateError,
    ValidationError,
    ValidationReport,
    raise_collected,
)
from dagwright.core.logging import get_logger
from dagwright.core.models.actions import (
    Action,
    EmailAction,
    HiveAction,
    JavaAction,
    Launcher,
    Prepare,
    ShellAction,
    SparkAction,
    build_model,
    collect_model_errors,
)

from .naming import node_name_problem

if TYPE_CHECKING:
    from .error_handler import ErrorHandler

logger = get_logger('builder')

ActionT = TypeVar('ActionT', bound=Action)
ActionT_co = TypeVar('ActionT_co', bound=Action, covariant=True)

# Only NodeBuilder.build() holds this token
_BUILD_TOKEN = object()


# =============================================================================
# Node
# =============================================================================


class Node(Generic[ActionT_co]):
    """
    A vertex of the workflow DAG: one named action plus its dependency edges.

    Nodes are created by `NodeBuilder.build()` only. After creation the name,
    action, parents and error handler never change; `children` grows as
    other builders declare this node as a parent.

    Example:
        ```python
        extract = ShellActionBuilder.create().with_name('extract') \\
            .with_executable('extract.sh').build()
        load = HiveActionBuilder.create().with_name('load') \\
            .with_parent(extract).with_script('load.q').build()
        assert load in extract.children
        ```
    """

    __slots__ = (
        '_name',
        '_action',
        '_parents',
        '_children',
        '_error_handler',
        '_is_error_handler',
    )

    def __init__(
        self,
        name: str,
        action: ActionT_co,
        parents: tuple[Node[Any], ...],
        error_handler: ErrorHandler | None,
        *,
        _token: object = None,
    ) -> None:
        if _token is not _BUILD_TOKEN:
            raise StateError(
                message='nodes can only be created by a builder',
                code=ErrorCode.NODE_CREATED_OUTSIDE_BUILDER,
                help_text='use e.g. HiveActionBuilder.create()...build()',
            )
        self._name = name
        self._action = action
        self._parents = parents
        self._children: list[Node[Any]] = []
        self._error_handler = error_handler
        self._is_error_handler = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def action(self) -> ActionT_co:
        return self._action

    @property
    def parents(self) -> tuple[Node[Any], ...]:
        """Nodes this node depends on, in declaration order."""
        return self._parents

    @property
    def children(self) -> tuple[Node[Any], ...]:
        """Nodes depending on this node, in the order they were built."""
        return tuple(self._children)

    @property
    def error_handler(self) -> ErrorHandler | None:
        """Handler whose node runs when this node's action fails."""
        return self._error_handler

    @property
    def is_error_handler(self) -> bool:
        """Whether this node is wrapped by an ErrorHandler."""
        return self._is_error_handler

    def _add_child(self, child: Node[Any]) -> None:
        self._children.append(child)

    def _mark_error_handler(self) -> None:
        self._is_error_handler = True

    def __repr__(self) -> str:
        return (
            f'Node(name={self._name!r}, action={type(self._action).__name__}, '
            f'parents={[p.name for p in self._parents]}, '
            f'children={[c.name for c in self._children]})'
        )


# =============================================================================
# Builders
# =============================================================================


def _contains(nodes: list[Node[Any]], node: Node[Any]) -> bool:
    return any(n is node for n in nodes)


class NodeBuilder(ABC, Generic[ActionT]):
    """
    Mutable staging area for one Node.

    Collects name, parents, error handler and action fields, then validates
    everything in `build()`. A builder produces at most one Node.
    """

    action_cls: ClassVar[type[Action]]

    def __init__(self) -> None:
        self._name: str | None = None
        self._parents: list[Node[Any]] = []
        self._error_handler: ErrorHandler | None = None
        self._fields: dict[str, Any] = {}
        self._built = False

    @classmethod
    def create(cls) -> Self:
        return cls()

    @classmethod
    def create_from_existing(cls, node: Node[Any]) -> Self:
        """
        Start a new builder from an existing node's name, parents, error
        handler and action fields. The existing node is not modified.
        """
        if not isinstance(node.action, cls.action_cls):
            raise ValidationError(
                message=f'{cls.__name__} cannot copy a {type(node.action).__name__}',
                code=ErrorCode.ACTION_INVALID_FIELD,
                notes=[f"node '{node.name}' holds a {node.action.action_type} action"],
            )
        builder = cls()
        builder._name = node.name
        builder._parents = list(node.parents)
        builder._error_handler = node.error_handler
        for field_name in type(node.action).model_fields:
            value = getattr(node.action, field_name)
            if isinstance(value, tuple):
                value = list(value)
            elif isinstance(value, dict):
                value = dict(value)
            builder._fields[field_name] = value
        return builder

    # ------------------------------------------------------------------ #
    # Graph wiring
    # ------------------------------------------------------------------ #

    def with_name(self, name: str) -> Self:
        self._check_not_built()
        self._name = name
        return self

    def with_parent(self, parent: Node[Any]) -> Self:
        """Declare a dependency on *parent*. Declaring the same parent twice is a no-op."""
        self._check_not_built()
        self._check_parent(parent)
        if not _contains(self._parents, parent):
            self._parents.append(parent)
        return self

    def without_parent(self, parent: Node[Any]) -> Self:
        self._check_not_built()
        self._parents = [p for p in self._parents if p is not parent]
        return self

    def clear_parents(self) -> Self:
        self._check_not_built()
        self._parents = []
        return self

    def with_error_handler(self, handler: ErrorHandler) -> Self:
        self._check_not_built()
        self._error_handler = handler
        return self

    @property
    def parents(self) -> tuple[Node[Any], ...]:
        return tuple(self._parents)

    @property
    def error_handler(self) -> ErrorHandler | None:
        return self._error_handler

    @property
    def is_built(self) -> bool:
        return self._built

    # ------------------------------------------------------------------ #
    # Build
    # ------------------------------------------------------------------ #

    def build(self) -> Node[ActionT]:
        """
        Validate the staged configuration and create the Node.

        On failure nothing is committed: no parent learns about a child and
        the builder can be fixed and built again.
        """
        self._check_not_built()

        report = ValidationReport('builder')
        problem = node_name_problem(self._name)
        if problem is not None:
            report.add(
                ValidationError(
                    message=problem,
                    code=ErrorCode.NODE_INVALID_NAME,
                    notes=[f'name={self._name!r}'],
                    help_text='node names must match pattern: [A-Za-z0-9_\\-:.]+',
                )
            )
        action = collect_model_errors(self.action_cls, self._staged_fields(), report)
        raise_collected(report)
        assert self._name is not None and action is not None

        node: Node[ActionT] = Node(
            self._name,
            action,  # type: ignore[arg-type]
            tuple(self._parents),
            self._error_handler,
            _token=_BUILD_TOKEN,
        )
        for parent in self._parents:
            parent._add_child(node)
        self._built = True

        logger.debug(
            f"built {action.action_type} node '{node.name}' "
            f'with {len(node.parents)} parent(s)'
        )
        return node

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _set(self, field_name: str, value: Any) -> Self:
        self._check_not_built()
        self._fields[field_name] = value
        return self

    def _append(self, field_name: str, value: Any) -> Self:
        self._check_not_built()
        self._fields.setdefault(field_name, []).append(value)
        return self

    def _staged_fields(self) -> dict[str, Any]:
        staged: dict[str, Any] = {}
        for key, value in self._fields.items():
            if isinstance(value, list):
                value = tuple(value)
            elif isinstance(value, dict):
                value = dict(value)
            staged[key] = value
        return staged

    def _check_not_built(self) -> None:
        if self._built:
            raise StateError(
                message='builder has already produced a node',
                code=ErrorCode.BUILDER_ALREADY_BUILT,
                notes=[f"node '{self._name}' was built from this builder"],
                help_text='create a new builder, or use create_from_existing(node)',
            )

    @staticmethod
    def _check_parent(parent: Node[Any]) -> None:
        if not isinstance(parent, Node):
            raise StateError(
                message='parent must be a Node',
                code=ErrorCode.INVALID_PARENT,
                notes=[f'got {type(parent).__name__}'],
                help_text='build the parent node first and pass the result',
            )
        if parent.is_error_handler:
            raise StateError(
                message='error handler nodes cannot have parents or children',
                code=ErrorCode.ERROR_HANDLER_AS_PARENT,
                notes=[f"'{parent.name}' is an error handler node"],
                help_text='error handlers run on a separate failure path; '
                'depend on the failing node instead',
            )


class HadoopActionBuilder(NodeBuilder[ActionT]):
    """Setters shared by actions that run on the cluster."""

    def with_resource_manager(self, resource_manager: str) -> Self:
        return self._set('resource_manager', resource_manager)

    def with_name_node(self, name_node: str) -> Self:
        return self._set('name_node', name_node)

    def with_prepare(self, prepare: Prepare) -> Self:
        return self._set('prepare', prepare)

    def with_launcher(self, launcher: Launcher) -> Self:
        return self._set('launcher', launcher)

    def with_job_xml(self, job_xml: str) -> Self:
        return self._append('job_xmls', job_xml)

    def with_config_property(self, key: str, value: str) -> Self:
        self._check_not_built()
        self._fields.setdefault('config', {})[key] = value
        return self

    def with_file(self, path: str) -> Self:
        return self._append('files', path)

    def with_archive(self, path: str) -> Self:
        return self._append('archives', path)


class HiveActionBuilder(HadoopActionBuilder[HiveAction]):
    action_cls = HiveAction

    def with_script(self, script: str) -> Self:
        return self._set('script', script)

    def with_query(self, query: str) -> Self:
        return self._set('query', query)

    def with_param(self, param: str) -> Self:
        return self._append('params', param)

    def with_arg(self, arg: str) -> Self:
        return self._append('args', arg)


class ShellActionBuilder(HadoopActionBuilder[ShellAction]):
    action_cls = ShellAction

    def with_executable(self, executable: str) -> Self:
        return self._set('executable', executable)

    def with_arg(self, arg: str) -> Self:
        return self._append('args', arg)

    def with_env_var(self, env_var: str) -> Self:
        return self._append('env_vars', env_var)

    def with_capture_output(self, capture_output: bool) -> Self:
        return self._set('capture_output', capture_output)


class SparkActionBuilder(HadoopActionBuilder[SparkAction]):
    action_cls = SparkAction

    def with_master(self, master: str) -> Self:
        return self._set('master', master)

    def with_mode(self, mode: str) -> Self:
        return self._set('mode', mode)

    def with_action_name(self, action_name: str) -> Self:
        """Name of the Spark application (not the node name)."""
        return self._set('action_name', action_name)

    def with_action_class(self, action_class: str) -> Self:
        return self._set('action_class', action_class)

    def with_jar(self, jar: str) -> Self:
        return self._set('jar', jar)

    def with_spark_opts(self, spark_opts: str) -> Self:
        return self._set('spark_opts', spark_opts)

    def with_arg(self, arg: str) -> Self:
        return self._append('args', arg)


class JavaActionBuilder(HadoopActionBuilder[JavaAction]):
    action_cls = JavaAction

    def with_main_class(self, main_class: str) -> Self:
        return self._set('main_class', main_class)

    def with_java_opts(self, java_opt: str) -> Self:
        return self._append('java_opts', java_opt)

    def with_arg(self, arg: str) -> Self:
        return self._append('args', arg)

    def with_capture_output(self, capture_output: bool) -> Self:
        return self._set('capture_output', capture_output)


class EmailActionBuilder(NodeBuilder[EmailAction]):
    action_cls = EmailAction

    def with_recipient(self, address: str) -> Self:
        return self._append('to', address)

    def with_cc(self, address: str) -> Self:
        return self._append('cc', address)

    def with_bcc(self, address: str) -> Self:
        return self._append('bcc', address)

    def with_subject(self, subject: str) -> Self:
        return self._set('subject', subject)

    def with_body(self, body: str) -> Self:
        return self._set('body', body)

    def with_content_type(self, content_type: str) -> Self:
        return self._set('content_type', content_type)

    def with_attachment(self, attachment: str) -> Self:
        return self._set('attachment', attachment)


# =============================================================================
# Prepare / Launcher builders
# =============================================================================


class PrepareBuilder:
    """Builds the `Prepare` steps of an action."""

    def __init__(self) -> None:
        self._deletes: list[dict[str, Any]] = []
        self._mkdirs: list[dict[str, Any]] = []

    def with_delete(self, path: str, skip_trash: bool | None = None) -> Self:
        self._deletes.append({'path': path, 'skip_trash': skip_trash})
        return self

    def with_mkdir(self, path: str) -> Self:
        self._mkdirs.append({'path': path})
        return self

    def build(self) -> Prepare:
        return build_model(
            Prepare, {'deletes': self._deletes, 'mkdirs': self._mkdirs}
        )


class LauncherBuilder:
    """Builds the `Launcher` settings of an action."""

    def __init__(self) -> None:
        self._fields: dict[str, Any] = {}

    def with_memory_mb(self, memory_mb: int) -> Self:
        self._fields['memory_mb'] = memory_mb
        return self

    def with_vcores(self, vcores: int) -> Self:
        self._fields['vcores'] = vcores
        return self

    def with_java_opts(self, java_opts: str) -> Self:
        self._fields['java_opts'] = java_opts
        return self

    def with_env(self, env: str) -> Self:
        self._fields['env'] = env
        return self

    def with_queue(self, queue: str) -> Self:
        self._fields['queue'] = queue
        return self

    def with_sharelib(self, sharelib: str) -> Self:
        self._fields['sharelib'] = sharelib
        return self

    def with_view_acl(self, view_acl: str) -> Self:
        self._fields['view_acl'] = view_acl
        return self

    def with_modify_acl(self, modify_acl: str) -> Self:
        self._fields['modify_acl'] = modify_acl
        return self

    def build(self) -> Launcher:
        return build_model(Launcher, self._fields)

