import json
import typing

import yaml


class MissingPrefixException(Exception):
    pass


def to_property_value(value: object) -> typing.Optional[str]:
    """
    Property values are always handed out as text. Strings are kept as is, everything else is written as JSON so
    that the parsers can read it back into the field type.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value)


class PropertyLoader:
    def __init__(self, yaml_path: str):
        self._yaml_path = yaml_path
        self._properties = {}
        self.load_properties()

    @property
    def yaml_path(self) -> str:
        return self._yaml_path

    def load_properties(self):
        with open(self._yaml_path, "r") as file:
            loaded = yaml.safe_load(file)
        self._properties = loaded if loaded is not None else {}

    def get_properties_by_prefix(self, prefix: str) -> dict:
        if prefix in self._properties:
            return self._properties[prefix]
        raise MissingPrefixException(f"Prefix '{prefix}' not found in {self._yaml_path}.")

    def flatten(self) -> dict[str, typing.Optional[str]]:
        """
        :return: every path in the file joined with dots. Nested mappings and lists are also available under their
        own key, written as JSON, so a whole section can be read as one structured property.
        """
        properties = {}
        for key, value in self._properties.items():
            self.load_prop_recursive(properties, value, str(key))
        return properties

    def load_prop_recursive(self, properties: dict, props, prev: str):
        properties[prev] = to_property_value(props)
        if isinstance(props, dict):
            for prop_key, prop_value in props.items():
                self.load_prop_recursive(properties, prop_value, f'{prev}.{prop_key}')
