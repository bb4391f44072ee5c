"""Standard mapping rules from action payloads to the workflow schema."""

from __future__ import annotations

from collections.abc import Mapping

from dagwright.core.errors import ErrorCode, MappingError
from dagwright.core.models.actions import (
    Delete,
    EmailAction,
    HiveAction,
    JavaAction,
    Launcher,
    Mkdir,
    Prepare,
    ShellAction,
    SparkAction,
)
from dagwright.core.schema import (
    ConfigurationElement,
    DeleteElement,
    EmailElement,
    HiveElement,
    JavaElement,
    LauncherElement,
    LauncherOption,
    MkdirElement,
    PrepareElement,
    PropertyElement,
    ShellElement,
    SparkElement,
)

from .mapper import FieldMapper, FieldRule

# Launcher fields and their XML kinds, in schema order.
# The document identifies each option by position and kind, so order matters.
LAUNCHER_OPTION_ORDER: tuple[tuple[str, str], ...] = (
    ('memory_mb', 'memory.mb'),
    ('vcores', 'vcores'),
    ('java_opts', 'java-opts'),
    ('env', 'env'),
    ('queue', 'queue'),
    ('sharelib', 'sharelib'),
    ('view_acl', 'view-acl'),
    ('modify_acl', 'modify-acl'),
)


def launcher_to_element(launcher: Launcher) -> LauncherElement:
    """Flatten launcher settings into ordered (kind, value) options."""
    known = {field_name for field_name, _ in LAUNCHER_OPTION_ORDER}
    for field_name in type(launcher).model_fields:
        if field_name not in known:
            raise MappingError(
                message=f"launcher field '{field_name}' has no option kind",
                code=ErrorCode.MAPPING_UNKNOWN_FIELD,
                field_name=field_name,
            )
    return LauncherElement(
        options=[
            LauncherOption(kind=kind, value=getattr(launcher, field_name))
            for field_name, kind in LAUNCHER_OPTION_ORDER
            if getattr(launcher, field_name) is not None
        ]
    )


def config_to_element(config: Mapping[str, str]) -> ConfigurationElement:
    return ConfigurationElement(
        property=[PropertyElement(name=key, value=value) for key, value in config.items()]
    )


def _comma_joined(addresses: tuple[str, ...]) -> str:
    return ','.join(addresses)


_HADOOP_RULES: tuple[FieldRule, ...] = (
    FieldRule('job_xmls', 'job_xml'),
    FieldRule('config', 'configuration', convert=config_to_element),
    FieldRule('files', 'file'),
    FieldRule('archives', 'archive'),
)


def default_mapper() -> FieldMapper:
    """Create a mapper that knows every built-in action kind."""
    mapper = FieldMapper()

    mapper.register(Delete, DeleteElement)
    mapper.register(Mkdir, MkdirElement)
    mapper.register(
        Prepare,
        PrepareElement,
        [FieldRule('deletes', 'delete'), FieldRule('mkdirs', 'mkdir')],
    )
    mapper.register(Launcher, LauncherElement, convert=launcher_to_element)

    mapper.register(
        HiveAction,
        HiveElement,
        [*_HADOOP_RULES, FieldRule('params', 'param'), FieldRule('args', 'argument')],
    )
    mapper.register(
        ShellAction,
        ShellElement,
        [
            *_HADOOP_RULES,
            FieldRule('executable', 'exec_'),
            FieldRule('args', 'argument'),
            FieldRule('env_vars', 'env_var'),
        ],
    )
    mapper.register(
        SparkAction,
        SparkElement,
        [
            *_HADOOP_RULES,
            FieldRule('action_name', 'name'),
            FieldRule('action_class', 'class_'),
            FieldRule('args', 'arg'),
        ],
    )
    mapper.register(
        JavaAction,
        JavaElement,
        [*_HADOOP_RULES, FieldRule('java_opts', 'java_opt'), FieldRule('args', 'arg')],
    )
    mapper.register(
        EmailAction,
        EmailElement,
        [
            FieldRule('to', 'to', convert=_comma_joined),
            FieldRule('cc', 'cc', convert=_comma_joined),
            FieldRule('bcc', 'bcc', convert=_comma_joined),
        ],
    )
    return mapper
