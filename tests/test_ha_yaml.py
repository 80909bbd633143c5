from __future__ import annotations

import pytest

from alexa_entities.core import ha_yaml
from alexa_entities.core.ha_yaml import CustomTagValue
from alexa_entities.errors import ConfigParseError

CANONICAL = """\
homeassistant:
  name: Home
  customize: !include customize.yaml
automation: !include automations.yaml
http:
  api_password: !secret http_password
alexa:
  smart_home:
    filter:
      include_entities:
        - light.kitchen
        - switch.fan
"""


def test_custom_tags_load_as_tagged_values():
    document = ha_yaml.loads(CANONICAL)

    assert document["automation"] == CustomTagValue("!include", "automations.yaml")
    assert document["http"]["api_password"] == CustomTagValue(
        "!secret", "http_password"
    )
    assert str(document["automation"]) == "!include automations.yaml"


def test_canonical_document_round_trips_exactly():
    assert ha_yaml.dumps(ha_yaml.loads(CANONICAL)) == CANONICAL


@pytest.mark.parametrize(
    "line",
    [
        "packages: !include_dir_named packages",
        "scripts: !include_dir_merge_named scripts/",
        "groups: !include_dir_list groups",
        "sensors: !include_dir_merge_list sensors",
        "home: !env_var HOME_DIR /config",
        "target: !input target_light",
    ],
)
def test_every_custom_tag_is_preserved(line):
    assert ha_yaml.dumps(ha_yaml.loads(line + "\n")) == line + "\n"


def test_tagged_values_inside_sequences():
    content = "secrets:\n  - !secret first\n  - !secret second\n"

    assert ha_yaml.dumps(ha_yaml.loads(content)) == content


def test_key_order_is_kept():
    content = "zeta: 1\nalpha: 2\nmiddle: 3\n"

    assert ha_yaml.dumps(ha_yaml.loads(content)) == content


def test_long_strings_are_not_wrapped():
    value = "word " * 60
    dumped = ha_yaml.dumps({"long": value.strip()})

    assert dumped.count("\n") == 1


@pytest.mark.parametrize("content", ["", "   \n", "# only a comment\n"])
def test_empty_document_is_an_empty_mapping(content):
    assert ha_yaml.loads(content) == {}


def test_invalid_yaml_is_a_parse_error():
    with pytest.raises(ConfigParseError, match="Failed to parse YAML"):
        ha_yaml.loads("alexa: [unclosed\n")


def test_top_level_must_be_a_mapping():
    with pytest.raises(ConfigParseError, match="mapping"):
        ha_yaml.loads("- a\n- b\n")


def test_custom_tag_on_a_mapping_is_rejected():
    with pytest.raises(ConfigParseError):
        ha_yaml.loads("thing: !include\n  nested: value\n")


def test_unknown_tags_are_still_rejected():
    with pytest.raises(ConfigParseError):
        ha_yaml.loads("thing: !python/name:os.system\n")
