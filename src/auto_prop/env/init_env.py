import importlib
import os
from typing import Optional

from dotenv import load_dotenv

from auto_prop.env.auto_prop_properties import AutoPropProperties
from auto_prop.env.property_source import PropertySource, YamlPropertySource, DictPropertySource
from auto_prop.util.logger import LoggerFacade


def load_env_file(name: Optional[str] = None) -> bool:
    """
    Load the .env file named, else the one at ENV_FILE_PATH, else the .env found by python-dotenv.
    :return: whether a file was loaded.
    """
    if name is not None:
        if not load_dotenv(name):
            LoggerFacade.error(f"Error loading .env file {name}.")
            return False
        return True
    if "ENV_FILE_PATH" in os.environ.keys():
        return load_dotenv(os.environ["ENV_FILE_PATH"])
    return load_dotenv()


def import_load(provider: str):
    """
    Import and instantiate the class at the dotted path, ex. my_package.my_module.MyPropertySource.
    """
    provider = provider.split(".")
    module = importlib.import_module(str.join('.', provider[0:len(provider) - 1]))
    to_return = module.__dict__[provider[len(provider) - 1]]
    LoggerFacade.info(f'Imported {to_return}.')
    return to_return()


def get_property_source(props: Optional[AutoPropProperties] = None) -> PropertySource:
    """
    The property source named by AUTO_PROP_SOURCE_PROVIDER if set, else the yaml files of the resources dir. Without
    a resources dir, an empty in-memory source.
    """
    if "AUTO_PROP_SOURCE_PROVIDER" in os.environ.keys():
        return import_load(os.environ["AUTO_PROP_SOURCE_PROVIDER"])
    if props is None:
        props = AutoPropProperties.from_env()
    if props.env_file is not None:
        load_env_file(props.env_file)
    if props.resources_dir is None:
        LoggerFacade.warn("No resources dir was configured. Starting with an empty property source.")
        return DictPropertySource()
    return YamlPropertySource(YamlPropertySource.get_yml_files(props.resources_dir), props.env_prefix)
