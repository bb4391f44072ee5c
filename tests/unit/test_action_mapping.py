"""Unit tests for FieldMapper and the standard action mapping rules."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel

from dagwright.core.errors import ErrorCode, MappingError
from dagwright.core.mapping import (
    FieldMapper,
    FieldRule,
    WorkflowTranslator,
    default_mapper,
    launcher_to_element,
)
from dagwright.core.models.actions import Launcher
from dagwright.core.models.workflow import (
    EmailActionBuilder,
    ErrorHandler,
    HiveActionBuilder,
    JavaActionBuilder,
    LauncherBuilder,
    PrepareBuilder,
    ShellActionBuilder,
    SparkActionBuilder,
    WorkflowBuilder,
)
from dagwright.core.schema import (
    ConfigurationElement,
    DeleteElement,
    EmailElement,
    HiveElement,
    JavaElement,
    LauncherOption,
    MkdirElement,
    PropertyElement,
    ShellElement,
    SparkElement,
)

pytestmark = pytest.mark.unit


# =============================================================================
# Standard rules
# =============================================================================


class TestHiveMapping:
    """Hive action with every kind of field set."""

    @pytest.fixture
    def element(self) -> HiveElement:
        node = (
            HiveActionBuilder.create()
            .with_name('hive-node')
            .with_resource_manager('${resourceManager}')
            .with_name_node('${nameNode}')
            .with_prepare(
                PrepareBuilder()
                .with_delete('/path/to/delete')
                .with_mkdir('/path/to/mkdir')
                .build()
            )
            .with_launcher(
                LauncherBuilder()
                .with_memory_mb(1024)
                .with_vcores(2)
                .with_queue('default')
                .with_sharelib('default')
                .with_view_acl('default')
                .with_modify_acl('default')
                .build()
            )
            .with_script('script.q')
            .with_arg('arg1')
            .with_arg('arg2')
            .build()
        )
        return default_mapper().map(node.action)

    def test_scalar_fields(self, element: HiveElement) -> None:
        assert isinstance(element, HiveElement)
        assert element.resource_manager == '${resourceManager}'
        assert element.name_node == '${nameNode}'
        assert element.script == 'script.q'
        assert element.query is None

    def test_prepare_steps(self, element: HiveElement) -> None:
        assert element.prepare is not None
        assert element.prepare.delete == [DeleteElement(path='/path/to/delete')]
        assert element.prepare.mkdir == [MkdirElement(path='/path/to/mkdir')]

    def test_arguments_keep_order(self, element: HiveElement) -> None:
        assert element.argument == ['arg1', 'arg2']

    def test_launcher_options_by_position(self, element: HiveElement) -> None:
        assert element.launcher is not None
        options = element.launcher.options
        assert len(options) == 6
        assert options[0] == LauncherOption(kind='memory.mb', value=1024)
        assert options[1] == LauncherOption(kind='vcores', value=2)
        assert options[2] == LauncherOption(kind='queue', value='default')
        assert options[3] == LauncherOption(kind='sharelib', value='default')
        assert options[4] == LauncherOption(kind='view-acl', value='default')
        assert options[5] == LauncherOption(kind='modify-acl', value='default')

    def test_unset_fields_stay_empty(self, element: HiveElement) -> None:
        assert element.configuration is None
        assert element.param == []
        assert element.file == []


class TestOtherKinds:
    def test_shell(self) -> None:
        node = (
            ShellActionBuilder.create()
            .with_name('sh')
            .with_executable('run.sh')
            .with_arg('a')
            .with_env_var('K=V')
            .with_file('run.sh#run.sh')
            .with_config_property('mapred.job.queue.name', 'etl')
            .with_capture_output(True)
            .build()
        )
        element = default_mapper().map(node.action)
        assert element == ShellElement(
            exec_='run.sh',
            argument=['a'],
            env_var=['K=V'],
            file=['run.sh#run.sh'],
            configuration=ConfigurationElement(
                property=[PropertyElement(name='mapred.job.queue.name', value='etl')]
            ),
            capture_output=True,
        )

    def test_spark(self) -> None:
        node = (
            SparkActionBuilder.create()
            .with_name('spark')
            .with_master('yarn')
            .with_mode('cluster')
            .with_action_name('aggregate')
            .with_action_class('org.example.Aggregate')
            .with_jar('agg.jar')
            .with_spark_opts('--executor-memory 2G')
            .with_arg('2024-01-01')
            .build()
        )
        element = default_mapper().map(node.action)
        assert isinstance(element, SparkElement)
        assert element.name == 'aggregate'
        assert element.class_ == 'org.example.Aggregate'
        assert element.arg == ['2024-01-01']
        assert element.spark_opts == '--executor-memory 2G'

    def test_java(self) -> None:
        node = (
            JavaActionBuilder.create()
            .with_name('java')
            .with_main_class('org.example.Main')
            .with_java_opts('-Xmx1g')
            .with_java_opts('-Dx=y')
            .with_arg('in')
            .build()
        )
        element = default_mapper().map(node.action)
        assert isinstance(element, JavaElement)
        assert element.java_opt == ['-Xmx1g', '-Dx=y']
        assert element.arg == ['in']
        assert element.capture_output is False

    def test_email_recipients_comma_joined(self) -> None:
        node = (
            EmailActionBuilder.create()
            .with_name('mail')
            .with_recipient('a@example.com')
            .with_recipient('b@example.com')
            .with_cc('c@example.com')
            .with_subject('done')
            .with_body('all good')
            .build()
        )
        element = default_mapper().map(node.action)
        assert element == EmailElement(
            to='a@example.com,b@example.com',
            cc='c@example.com',
            subject='done',
            body='all good',
        )

    def test_explicit_false_is_kept(self) -> None:
        prepare = PrepareBuilder().with_delete('/p', skip_trash=False).build()
        element = default_mapper().map(prepare)
        assert element.delete == [DeleteElement(path='/p', skip_trash=False)]

    def test_mapping_is_repeatable(self) -> None:
        node = (
            HiveActionBuilder.create()
            .with_name('h')
            .with_query('SELECT 1')
            .with_param('A=1')
            .build()
        )
        mapper = default_mapper()
        assert mapper.map(node.action) == mapper.map(node.action)


# =============================================================================
# Generic mapper behavior
# =============================================================================


class _Source(BaseModel):
    name: str
    extra: str | None = None
    items: tuple[str, ...] = ()
    props: dict[str, str] = {}


@dataclass(kw_only=True)
class _Target:
    name: str
    items: list[str] = field(default_factory=list)


@dataclass(kw_only=True)
class _ScalarTarget:
    name: str
    items: str | None = None
    props: dict[str, str] | None = None


@dataclass(kw_only=True)
class _StrictTarget:
    name: str
    required: str


class TestFieldMapper:
    def test_copies_like_named_fields(self) -> None:
        mapper = FieldMapper()
        mapper.register(_Source, _Target)
        assert mapper.map(_Source(name='n', items=('a', 'b'))) == _Target(
            name='n', items=['a', 'b']
        )

    def test_rule_renames_and_converts(self) -> None:
        mapper = FieldMapper()
        mapper.register(
            _Source,
            _StrictTarget,
            [FieldRule('extra', 'required', convert=str.upper)],
        )
        assert mapper.map(_Source(name='n', extra='x')) == _StrictTarget(
            name='n', required='X'
        )

    def test_unknown_field(self) -> None:
        mapper = FieldMapper()
        mapper.register(_Source, _Target)
        with pytest.raises(MappingError) as exc_info:
            mapper.map(_Source(name='n', extra='dropped?'))
        assert exc_info.value.code == ErrorCode.MAPPING_UNKNOWN_FIELD
        assert exc_info.value.field_name == 'extra'

    def test_missing_required_target(self) -> None:
        mapper = FieldMapper()
        mapper.register(_Source, _StrictTarget)
        with pytest.raises(MappingError) as exc_info:
            mapper.map(_Source(name='n'))
        assert exc_info.value.code == ErrorCode.MAPPING_MISSING_REQUIRED
        assert exc_info.value.field_name == 'required'

    def test_repeated_into_single(self) -> None:
        mapper = FieldMapper()
        mapper.register(_Source, _ScalarTarget)
        with pytest.raises(MappingError) as exc_info:
            mapper.map(_Source(name='n', items=('a',)))
        assert exc_info.value.code == ErrorCode.MAPPING_INCOMPATIBLE_VALUE
        assert exc_info.value.field_name == 'items'

    def test_key_value_field_needs_converter(self) -> None:
        mapper = FieldMapper()
        mapper.register(_Source, _ScalarTarget)
        with pytest.raises(MappingError) as exc_info:
            mapper.map(_Source(name='n', props={'k': 'v'}))
        assert exc_info.value.code == ErrorCode.MAPPING_INCOMPATIBLE_VALUE

    def test_unregistered_source(self) -> None:
        with pytest.raises(MappingError) as exc_info:
            FieldMapper().map(_Source(name='n'))
        assert exc_info.value.code == ErrorCode.MAPPING_NO_TARGET

    def test_copy_fields_checks_target(self) -> None:
        mapper = FieldMapper()
        mapper.register(_Source, _Target)
        with pytest.raises(MappingError) as exc_info:
            mapper.copy_fields(_Source(name='n'), _StrictTarget)
        assert exc_info.value.code == ErrorCode.MAPPING_NO_TARGET

    def test_target_must_be_dataclass(self) -> None:
        with pytest.raises(TypeError):
            FieldMapper().register(_Source, dict)

    def test_launcher_field_without_kind(self) -> None:
        class _WideLauncher(Launcher):
            burst: int | None = None

        with pytest.raises(MappingError) as exc_info:
            launcher_to_element(_WideLauncher(memory_mb=1))
        assert exc_info.value.code == ErrorCode.MAPPING_UNKNOWN_FIELD
        assert exc_info.value.field_name == 'burst'


# =============================================================================
# Translator
# =============================================================================


class TestWorkflowTranslator:
    def test_translate(self) -> None:
        notify = ErrorHandler.build_as_error_handler(
            EmailActionBuilder.create()
            .with_name('notify')
            .with_recipient('ops@example.com')
            .with_subject('failed')
            .with_body('see logs')
        )
        extract = (
            ShellActionBuilder.create()
            .with_name('extract')
            .with_executable('extract.sh')
            .with_error_handler(notify)
            .build()
        )
        workflow = WorkflowBuilder().with_name('etl').with_dag_containing_node(extract).build()

        app = WorkflowTranslator(default_mapper()).translate(workflow)

        assert app.name == 'etl'
        assert app.xmlns == 'uri:oozie:workflow:1.0'
        assert app.start_to == ['extract']
        assert [a.name for a in app.actions] == ['extract', 'notify']
        assert app.action('extract').ok_to == ['end']
        assert app.action('extract').error_to == 'notify'
        assert isinstance(app.action('notify').body, EmailElement)
        assert [k.name for k in app.kills] == ['kill']
        assert app.end_name == 'end'

    def test_mapping_error_names_node(self) -> None:
        node = ShellActionBuilder.create().with_name('extract').with_executable('e.sh').build()
        workflow = WorkflowBuilder().with_name('etl').with_dag_containing_node(node).build()

        with pytest.raises(MappingError) as exc_info:
            WorkflowTranslator(FieldMapper()).translate(workflow)
        assert "while translating node 'extract'" in exc_info.value.notes

    def test_body_must_be_action_element(self) -> None:
        from dagwright.core.models.actions import ShellAction

        mapper = FieldMapper()
        mapper.register(
            ShellAction,
            PropertyElement,
            convert=lambda action: PropertyElement(name='exec', value=action.executable),
        )
        node = ShellActionBuilder.create().with_name('extract').with_executable('e.sh').build()
        workflow = WorkflowBuilder().with_name('etl').with_dag_containing_node(node).build()

        with pytest.raises(MappingError) as exc_info:
            WorkflowTranslator(mapper).translate(workflow)
        assert exc_info.value.code == ErrorCode.MAPPING_NO_TARGET
