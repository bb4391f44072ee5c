"""Target-schema records of the action elements.

`XML_TAG` and `XMLNS` name the element and its namespace; `XMLNS = None`
keeps the element in the workflow namespace.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from .common import ConfigurationElement, LauncherElement, PrepareElement


@dataclass(kw_only=True)
class ActionBodyElement:
    XML_TAG: ClassVar[str]
    XMLNS: ClassVar[str | None] = None


@dataclass(kw_only=True)
class HiveElement(ActionBodyElement):
    XML_TAG: ClassVar[str] = 'hive'
    XMLNS: ClassVar[str | None] = 'uri:oozie:hive-action:1.0'

    resource_manager: str | None = None
    name_node: str | None = None
    prepare: PrepareElement | None = None
    launcher: LauncherElement | None = None
    job_xml: list[str] = field(default_factory=list)
    configuration: ConfigurationElement | None = None
    script: str | None = None
    query: str | None = None
    param: list[str] = field(default_factory=list)
    argument: list[str] = field(default_factory=list)
    file: list[str] = field(default_factory=list)
    archive: list[str] = field(default_factory=list)


@dataclass(kw_only=True)
class ShellElement(ActionBodyElement):
    XML_TAG: ClassVar[str] = 'shell'
    XMLNS: ClassVar[str | None] = 'uri:oozie:shell-action:1.0'

    resource_manager: str | None = None
    name_node: str | None = None
    prepare: PrepareElement | None = None
    launcher: LauncherElement | None = None
    job_xml: list[str] = field(default_factory=list)
    configuration: ConfigurationElement | None = None
    exec_: str = field(metadata={'xml': 'exec'})
    argument: list[str] = field(default_factory=list)
    env_var: list[str] = field(default_factory=list)
    file: list[str] = field(default_factory=list)
    archive: list[str] = field(default_factory=list)
    capture_output: bool = False


@dataclass(kw_only=True)
class SparkElement(ActionBodyElement):
    XML_TAG: ClassVar[str] = 'spark'
    XMLNS: ClassVar[str | None] = 'uri:oozie:spark-action:1.0'

    resource_manager: str | None = None
    name_node: str | None = None
    prepare: PrepareElement | None = None
    launcher: LauncherElement | None = None
    job_xml: list[str] = field(default_factory=list)
    configuration: ConfigurationElement | None = None
    master: str
    mode: str | None = None
    name: str
    class_: str | None = field(default=None, metadata={'xml': 'class'})
    jar: str
    spark_opts: str | None = None
    arg: list[str] = field(default_factory=list)
    file: list[str] = field(default_factory=list)
    archive: list[str] = field(default_factory=list)


@dataclass(kw_only=True)
class JavaElement(ActionBodyElement):
    XML_TAG: ClassVar[str] = 'java'

    resource_manager: str | None = None
    name_node: str | None = None
    prepare: PrepareElement | None = None
    launcher: LauncherElement | None = None
    job_xml: list[str] = field(default_factory=list)
    configuration: ConfigurationElement | None = None
    main_class: str
    java_opt: list[str] = field(default_factory=list)
    arg: list[str] = field(default_factory=list)
    file: list[str] = field(default_factory=list)
    archive: list[str] = field(default_factory=list)
    capture_output: bool = False


@dataclass(kw_only=True)
class EmailElement(ActionBodyElement):
    XML_TAG: ClassVar[str] = 'email'
    XMLNS: ClassVar[str | None] = 'uri:oozie:email-action:0.2'

    to: str
    cc: str | None = None
    bcc: str | None = None
    subject: str
    body: str
    content_type: str | None = None
    attachment: str | None = None
