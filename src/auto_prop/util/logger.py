import logging
import os

LOGGER_NAME = 'auto_prop'


def _create_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    level = os.environ.get('AUTO_PROP_LOG_LEVEL')
    if level is not None:
        logger.setLevel(level.upper())
    return logger


class LoggerFacade:
    """
    Facade over the package logger so call sites log with a single import, mirroring the facade used by the
    container framework.
    """

    logger: logging.Logger = _create_logger()

    @classmethod
    def debug(cls, output: str):
        cls.logger.debug(output)

    @classmethod
    def info(cls, output: str):
        cls.logger.info(output)

    @classmethod
    def warn(cls, output: str):
        cls.logger.warning(output)

    @classmethod
    def error(cls, output: str):
        cls.logger.error(output)
