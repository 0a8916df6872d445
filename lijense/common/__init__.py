# Common utilities
from lijense.common.codec import Codec as Codec
from lijense.common.config import Config as Config
from lijense.common.logging_utils import setup_logger as setup_logger
from lijense.common.mixins import Configurable as Configurable

__all__ = ["Codec", "Config", "Configurable", "setup_logger"]
