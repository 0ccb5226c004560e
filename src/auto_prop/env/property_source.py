import abc
import os
import threading
import typing
from typing import Optional

import injector

from auto_prop.env.properties_loader import PropertyLoader, to_property_value
from auto_prop.util.logger import LoggerFacade

PropertyCallback = typing.Callable[[Optional[str]], None]

property_source_lock = threading.RLock()


class PropertySource(abc.ABC):
    """
    Dynamic store of text properties keyed by name. Values are read through on every call so that holders of a
    property observe updates, and subscribers are told when a value changes.
    """

    def __init__(self):
        self._subscribers: dict[str, list[PropertyCallback]] = {}

    @abc.abstractmethod
    def get_property(self, name: str) -> Optional[str]:
        pass

    @abc.abstractmethod
    def set_property(self, name: str, value: object):
        pass

    def contains_property(self, name: str) -> bool:
        return self.get_property(name) is not None

    @injector.synchronized(property_source_lock)
    def subscribe(self, name: str, callback: PropertyCallback):
        if name in self._subscribers.keys():
            self._subscribers[name].append(callback)
        else:
            self._subscribers[name] = [callback]

    def notify(self, name: str):
        with property_source_lock:
            callbacks = list(self._subscribers.get(name, []))
        if len(callbacks) == 0:
            return
        value = self.get_property(name)
        LoggerFacade.debug(f"Notifying {len(callbacks)} subscribers of property {name}.")
        for callback in callbacks:
            try:
                callback(value)
            except Exception as e:
                LoggerFacade.error(f"Subscriber {callback} of property {name} failed: {e}")


class DictPropertySource(PropertySource):

    def __init__(self, properties: Optional[dict[str, object]] = None):
        super().__init__()
        self._properties: dict[str, Optional[str]] = {
            k: to_property_value(v) for k, v in properties.items()
        } if properties is not None else {}

    def get_property(self, name: str) -> Optional[str]:
        return self._properties.get(name)

    def set_property(self, name: str, value: object):
        with property_source_lock:
            self._properties[name] = to_property_value(value)
        self.notify(name)

    def remove_property(self, name: str):
        with property_source_lock:
            if name not in self._properties.keys():
                return
            del self._properties[name]
        self.notify(name)


class YamlPropertySource(PropertySource):
    """
    Properties from yaml files, later files taking precedence over earlier ones. Environment variables override the
    files, ex. io.pleo.name is overridden by IO_PLEO_NAME (prefixed with env_prefix when provided), and values set at
    runtime override both.

    Without an env_prefix only dotted names are read from the environment, so a property named path or home is
    never taken from PATH or HOME.
    """

    def __init__(self, yml_files: list[str], env_prefix: Optional[str] = None):
        super().__init__()
        self.yml_files = yml_files
        self.env_prefix = env_prefix
        self._file_properties: dict[str, Optional[str]] = {}
        self._overrides: dict[str, Optional[str]] = {}
        self.reload()

    @staticmethod
    def get_yml_files(resources_dir: str) -> list[str]:
        yml_files = []
        if not os.path.exists(resources_dir):
            LoggerFacade.error(f"Resources dir {resources_dir} did not exist. No yaml properties will be loaded.")
            return yml_files
        for file in os.listdir(resources_dir):
            if os.path.isfile(os.path.join(resources_dir, file)) and (os.path.basename(file).endswith('.yml')
                                                                       or os.path.basename(file).endswith('.yaml')):
                yml_files.append(os.path.join(resources_dir, file))
        return sorted(yml_files, key=lambda x: (len(x), x))

    def env_name(self, name: str) -> Optional[str]:
        env_name = name.upper().replace('.', '_').replace('-', '_')
        if self.env_prefix is not None:
            return f'{self.env_prefix.upper()}_{env_name}'
        if '.' not in name:
            return None
        return env_name

    def get_property(self, name: str) -> Optional[str]:
        if name in self._overrides.keys():
            return self._overrides[name]
        env_name = self.env_name(name)
        if env_name is not None and env_name in os.environ.keys():
            return os.environ[env_name]
        return self._file_properties.get(name)

    def set_property(self, name: str, value: object):
        with property_source_lock:
            self._overrides[name] = to_property_value(value)
        self.notify(name)

    def reload(self):
        LoggerFacade.info(f"Loading properties from yaml files: {self.yml_files}.")
        loaded: dict[str, Optional[str]] = {}
        for yml_file in self.yml_files:
            loaded.update(PropertyLoader(yml_file).flatten())

        with property_source_lock:
            previous = self._file_properties
            self._file_properties = loaded
            changed = [
                k for k in set(previous.keys()) | set(loaded.keys())
                if previous.get(k) != loaded.get(k)
            ]

        for name in changed:
            self.notify(name)
