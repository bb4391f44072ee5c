"""Target-schema records shared by several action elements.

Field order is the element order of the workflow XML schema. The XML name
of a field defaults to its name with '_' replaced by '-' and can be set
with `metadata={'xml': ...}`. `metadata={'attr': True}` writes the field as
an attribute, `metadata={'inline': True}` writes list items straight into
the parent element.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(kw_only=True)
class DeleteElement:
    path: str = field(metadata={'attr': True})
    skip_trash: bool | None = field(default=None, metadata={'attr': True})


@dataclass(kw_only=True)
class MkdirElement:
    path: str = field(metadata={'attr': True})


@dataclass(kw_only=True)
class PrepareElement:
    delete: list[DeleteElement] = field(default_factory=list)
    mkdir: list[MkdirElement] = field(default_factory=list)


@dataclass(kw_only=True)
class LauncherOption:
    """One launcher setting; `kind` is its XML element name."""

    kind: str
    value: int | str


@dataclass(kw_only=True)
class LauncherElement:
    """Launcher settings, kept as an ordered list of (kind, value) options."""

    options: list[LauncherOption] = field(
        default_factory=list, metadata={'inline': True}
    )


@dataclass(kw_only=True)
class PropertyElement:
    name: str
    value: str


@dataclass(kw_only=True)
class ConfigurationElement:
    property: list[PropertyElement] = field(default_factory=list)
