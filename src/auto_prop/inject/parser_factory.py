import abc
import decimal
import json
import typing

import pydantic
from pydantic import TypeAdapter, ValidationError

from auto_prop.core.prop import PropParser
from auto_prop.inject.prop_exceptions import FailedToCreatePropException
from auto_prop.util.logger import LoggerFacade

PRIMITIVE_TYPES = (int, float, bool, decimal.Decimal)


class ParserFactory(abc.ABC):

    @abc.abstractmethod
    def create_parser(self, property_name: str, target_type: typing.Any) -> PropParser:
        """
        :return: a function decoding the text of the property into target_type, raising FailedToCreatePropException
        when the text cannot be decoded.
        """
        pass


def is_primitive(target_type: typing.Any) -> bool:
    return target_type is str or target_type in PRIMITIVE_TYPES


class PydanticParserFactory(ParserFactory):
    """
    Strings are passed through, primitives are converted from their text, everything else is read as JSON into the
    type with pydantic. Classes pydantic cannot describe are built by passing the JSON object as keyword arguments.
    """

    def create_parser(self, property_name: str, target_type: typing.Any) -> PropParser:
        if target_type is str:
            return lambda raw: raw
        if is_primitive(target_type):
            adapter = TypeAdapter(target_type)
            return self._wrap_errors(property_name, adapter.validate_python)
        try:
            adapter = TypeAdapter(target_type)
            return self._wrap_errors(property_name, adapter.validate_json)
        except pydantic.PydanticSchemaGenerationError:
            LoggerFacade.debug(f"Could not generate schema for {target_type}. Prop {property_name} will be "
                               f"constructed from the JSON object.")
            return self._wrap_errors(property_name, lambda raw: self._construct(target_type, raw))

    @staticmethod
    def _construct(target_type: typing.Type, raw: str):
        loaded = json.loads(raw)
        if not isinstance(loaded, dict):
            raise ValueError(f"Expected a JSON object to construct {target_type.__qualname__} but found "
                             f"{type(loaded).__name__}.")
        return target_type(**loaded)

    @staticmethod
    def _wrap_errors(property_name: str, parser: PropParser) -> PropParser:
        def parse(raw: str):
            try:
                return parser(raw)
            except (ValidationError, ValueError, TypeError) as e:
                raise FailedToCreatePropException(property_name, f"could not decode {raw!r}: {e}") from e

        return parse
