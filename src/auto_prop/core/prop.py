import abc
import threading
import typing
from typing import Optional

from auto_prop.env.property_source import PropertySource
from auto_prop.inject.prop_exceptions import MissingPropValueException
from auto_prop.util.logger import LoggerFacade

T = typing.TypeVar("T")

PropParser = typing.Callable[[str], T]

_NOT_PARSED = object()


class LiveValue:
    """
    The raw text of one property. Reads through to the property source on every call.
    """

    def __init__(self, property_name: str, source: PropertySource):
        self.property_name = property_name
        self.source = source

    def get(self) -> Optional[str]:
        return self.source.get_property(self.property_name)

    def subscribe(self, callback: typing.Callable[[Optional[str]], None]):
        self.source.subscribe(self.property_name, callback)

    def __repr__(self):
        return f'LiveValue({self.property_name})'


class Prop(typing.Generic[T], abc.ABC):
    """
    Supplier of the current value of a property, decoded to T.
    """

    @property
    @abc.abstractmethod
    def property_name(self) -> str:
        pass

    @abc.abstractmethod
    def get(self) -> T:
        pass

    @abc.abstractmethod
    def add_callback(self, callback: typing.Callable[[T], None]):
        pass


class ParsedProp(Prop[T]):

    def __init__(self, live_value: LiveValue, parser: PropParser):
        self._live_value = live_value
        self._parser = parser
        self._lock = threading.RLock()
        self._raw = _NOT_PARSED
        self._value: Optional[T] = None

    @property
    def property_name(self) -> str:
        return self._live_value.property_name

    def get(self) -> T:
        raw = self._live_value.get()
        if raw is None:
            raise MissingPropValueException(self.property_name)
        with self._lock:
            if raw != self._raw:
                LoggerFacade.debug(f"Parsing new value of prop {self.property_name}.")
                self._value = self._parser(raw)
                self._raw = raw
            return self._value

    def add_callback(self, callback: typing.Callable[[T], None]):
        def on_change(raw: Optional[str]):
            if raw is None:
                LoggerFacade.warn(f"Prop {self.property_name} was removed. Callback {callback} was not called.")
                return
            callback(self.get())

        self._live_value.subscribe(on_change)

    def __repr__(self):
        return f'Prop({self.property_name})'
