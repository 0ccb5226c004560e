import abc
import threading

import injector

from auto_prop.core.prop import LiveValue
from auto_prop.env.property_source import PropertySource
from auto_prop.util.logger import LoggerFacade

prop_factory_lock = threading.RLock()


class PropFactory(abc.ABC):

    @abc.abstractmethod
    def create_prop(self, property_name: str) -> LiveValue:
        """
        :return: the live value of the property. Repeated calls with the same name return the same LiveValue.
        """
        pass


class PropertySourcePropFactory(PropFactory):

    def __init__(self, source: PropertySource):
        self.source = source
        self._live_values: dict[str, LiveValue] = {}

    @injector.synchronized(prop_factory_lock)
    def create_prop(self, property_name: str) -> LiveValue:
        if property_name in self._live_values.keys():
            return self._live_values[property_name]
        LoggerFacade.debug(f"Creating live value for property {property_name}.")
        live_value = LiveValue(property_name, self.source)
        self._live_values[property_name] = live_value
        return live_value
