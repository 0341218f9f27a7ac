from .config_parser import get_webserver_settings, load_config
from .config_schema import validate_config
from .logging_config import init_logging

__all__ = ["get_webserver_settings", "init_logging", "load_config", "validate_config"]
