import threading
import typing
from typing import Optional

import injector

from auto_prop.core.prop import Prop, ParsedProp
from auto_prop.inject.parser_factory import ParserFactory
from auto_prop.inject.prop_factory import PropFactory
from auto_prop.inject.prop_field import collect_prop_fields, has_prop_fields, collect_prop_parameters
from auto_prop.util.logger import LoggerFacade

T = typing.TypeVar("T")

members_injector_lock = threading.RLock()


class PropMembersInjector:
    """
    Populates the prop fields of objects. Props are shared, so every field requesting the same property as the same
    type receives the same Prop.
    """

    def __init__(self, prop_factory: PropFactory, parser_factory: ParserFactory,
                 base_package: Optional[str] = None,
                 fail_fast: bool = True):
        """
        :param base_package: only classes defined in modules under this package are injected. None for all classes.
        :param fail_fast: validate reads the props of the class as well as its declarations.
        """
        self.prop_factory = prop_factory
        self.parser_factory = parser_factory
        self.base_package = base_package
        self.fail_fast = fail_fast
        self._props: dict[typing.Tuple[str, typing.Any], Prop] = {}

    def applies_to(self, cls: typing.Type) -> bool:
        if not has_prop_fields(cls):
            return False
        if self.base_package is None:
            return True
        module = getattr(cls, '__module__', None)
        if module is None:
            return False
        in_package = module == self.base_package or module.startswith(f'{self.base_package}.')
        if not in_package:
            LoggerFacade.debug(f"Skipping props of {cls.__qualname__} as {module} is not in {self.base_package}.")
        return in_package

    @injector.synchronized(members_injector_lock)
    def get_prop(self, property_name: str, target_type: typing.Type[T]) -> Prop[T]:
        key = (property_name, target_type)
        if key in self._props.keys():
            return self._props[key]
        live_value = self.prop_factory.create_prop(property_name)
        parser = self.parser_factory.create_parser(property_name, target_type)
        created = ParsedProp(live_value, parser)
        LoggerFacade.debug(f"Created prop {property_name} of type {target_type}.")
        self._props[key] = created
        return created

    def provide(self, property_name: str, target_type: typing.Type[T]) -> Prop[T]:
        """
        :return: the shared prop, read once so that a property that is missing or cannot be decoded fails here rather
        than on first use.
        """
        created = self.get_prop(property_name, target_type)
        created.get()
        return created

    def create_props(self, cls: typing.Type) -> dict[str, Prop]:
        """
        :return: the field name to the prop for each prop field of cls.
        """
        return {
            prop_field.field_name: self.provide(prop_field.property_name, prop_field.target_type)
            for prop_field in collect_prop_fields(cls)
        }

    def validate(self, cls: typing.Type):
        parameters = collect_prop_parameters(cls)
        if self.fail_fast:
            for parameter in parameters:
                self.provide(parameter.property_name, parameter.target_type)
        if not self.applies_to(cls):
            return
        if self.fail_fast:
            self.create_props(cls)
        else:
            collect_prop_fields(cls)

    def inject_members(self, instance: T) -> T:
        cls = type(instance)
        if not self.applies_to(cls):
            return instance
        for field_name, created in self.create_props(cls).items():
            setattr(instance, field_name, created)
        LoggerFacade.debug(f"Injected props into {cls.__qualname__}.")
        return instance
