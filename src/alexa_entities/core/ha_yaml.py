"""YAML codec that keeps Home Assistant's custom tags intact.

Home Assistant extends YAML with tags such as ``!include`` and ``!secret``.
They are loaded as :class:`CustomTagValue` nodes instead of being resolved, and
dumped back with the same tag and payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import yaml

from alexa_entities.errors import ConfigParseError

CUSTOM_TAGS = (
    "!include",
    "!include_dir_list",
    "!include_dir_named",
    "!include_dir_merge_list",
    "!include_dir_merge_named",
    "!secret",
    "!env_var",
    "!input",
)


@dataclass(frozen=True)
class CustomTagValue:
    """A scalar carrying one of :data:`CUSTOM_TAGS`."""

    tag: str
    value: str

    def __str__(self) -> str:
        return f"{self.tag} {self.value}"


class HALoader(yaml.SafeLoader):
    pass


class HADumper(yaml.SafeDumper):
    def ignore_aliases(self, data: Any) -> bool:
        return True

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        # indent block sequences under their parent key
        return super().increase_indent(flow, False)

    def choose_scalar_style(self) -> str:
        style = super().choose_scalar_style()
        if style != "'" or self.event.style or self.event.tag not in CUSTOM_TAGS:
            return style
        # tagged scalars are explicit, so plain style is safe when YAML allows it
        if self.analysis is None:
            self.analysis = self.analyze_scalar(self.event.value)
        analysis = self.analysis
        if self.simple_key_context and (analysis.empty or analysis.multiline):
            return style
        if self.flow_level:
            return "" if analysis.allow_flow_plain else style
        return "" if analysis.allow_block_plain else style


def _construct_custom_tag(loader: HALoader, node: yaml.Node) -> CustomTagValue:
    if not isinstance(node, yaml.ScalarNode):
        raise yaml.constructor.ConstructorError(
            None,
            None,
            f"expected a scalar value for tag {node.tag}",
            node.start_mark,
        )
    return CustomTagValue(node.tag, loader.construct_scalar(node))


def _represent_custom_tag(dumper: HADumper, data: CustomTagValue) -> yaml.ScalarNode:
    return dumper.represent_scalar(data.tag, data.value)


for _tag in CUSTOM_TAGS:
    HALoader.add_constructor(_tag, _construct_custom_tag)
HADumper.add_representer(CustomTagValue, _represent_custom_tag)


def loads(content: str) -> dict[str, Any]:
    """Parse a configuration document; an empty document yields ``{}``."""
    try:
        document = yaml.load(content, Loader=HALoader)  # noqa: S506
    except yaml.YAMLError as exc:
        raise ConfigParseError(f"Failed to parse YAML: {exc}") from exc

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigParseError(
            "Failed to parse YAML: top level of the configuration must be a mapping"
        )
    return document


def dumps(document: dict[str, Any]) -> str:
    return yaml.dump(
        document,
        Dumper=HADumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        indent=2,
        width=float("inf"),
    )
