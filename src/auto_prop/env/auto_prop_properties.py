import os
import typing
from typing import Optional

from pydantic import BaseModel

ENV_PREFIX = 'AUTO_PROP_'


class AutoPropProperties(BaseModel):
    base_package: Optional[str] = None
    resources_dir: Optional[str] = None
    env_file: Optional[str] = None
    env_prefix: Optional[str] = None
    fail_fast: bool = True

    @classmethod
    def from_env(cls, environ: typing.Optional[typing.Mapping[str, str]] = None):
        """
        Read AUTO_PROP_* variables, ex. AUTO_PROP_BASE_PACKAGE. The resources dir falls back to RESOURCES_DIR and
        then PROJ_HOME/resources.
        :param environ: defaults to os.environ.
        """
        from auto_prop.env.init_env import load_env_file
        if environ is None:
            load_env_file(os.environ.get(f'{ENV_PREFIX}ENV_FILE'))
            environ = os.environ

        values = {
            field: environ[f'{ENV_PREFIX}{field.upper()}'] for field in cls.model_fields.keys()
            if f'{ENV_PREFIX}{field.upper()}' in environ.keys()
        }

        if 'resources_dir' not in values.keys():
            if 'RESOURCES_DIR' in environ.keys():
                values['resources_dir'] = environ['RESOURCES_DIR']
            elif 'PROJ_HOME' in environ.keys():
                values['resources_dir'] = os.path.join(environ['PROJ_HOME'], 'resources')

        return cls(**values)
