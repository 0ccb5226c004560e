from typing import Optional

import injector

from auto_prop.env.auto_prop_properties import AutoPropProperties
from auto_prop.env.init_env import get_property_source
from auto_prop.inject.parser_factory import ParserFactory, PydanticParserFactory
from auto_prop.inject.prop_factory import PropFactory, PropertySourcePropFactory
from auto_prop.inject.prop_members_injector import PropMembersInjector
from auto_prop.util.logger import LoggerFacade


class AutoPropModule(injector.Module):
    """
    Binds the factories used to create props. Install it in a PropInjector for the prop fields of the objects the
    injector creates to be populated.
    """

    def __init__(self, base_package: Optional[str] = None,
                 prop_factory: Optional[PropFactory] = None,
                 parser_factory: Optional[ParserFactory] = None,
                 fail_fast: Optional[bool] = None,
                 properties: Optional[AutoPropProperties] = None):
        """
        :param base_package: only classes under this package have their props injected. None for every class.
        :param prop_factory: source of the props. Defaults to the property source configured in the environment.
        :param parser_factory: decodes the props. Defaults to pydantic.
        :param fail_fast: read the props of the explicitly bound classes when the injector is created.
        :param properties: defaults for the arguments not provided, read from the environment when needed.
        """
        if properties is None:
            properties = AutoPropProperties.from_env() if prop_factory is None else AutoPropProperties()
        if prop_factory is None:
            prop_factory = PropertySourcePropFactory(get_property_source(properties))
        self.base_package = base_package if base_package is not None else properties.base_package
        self.fail_fast = fail_fast if fail_fast is not None else properties.fail_fast
        self.prop_factory = prop_factory
        self.parser_factory = parser_factory if parser_factory is not None else PydanticParserFactory()
        self.members_injector = PropMembersInjector(self.prop_factory, self.parser_factory, self.base_package,
                                                    self.fail_fast)

    def configure(self, binder: injector.Binder) -> None:
        LoggerFacade.debug(f"Binding auto prop module with base package {self.base_package}.")
        binder.bind(PropFactory, to=self.prop_factory, scope=injector.singleton)
        binder.bind(ParserFactory, to=self.parser_factory, scope=injector.singleton)
        binder.bind(PropMembersInjector, to=self.members_injector, scope=injector.singleton)
