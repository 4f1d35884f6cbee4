from .settings import RenderConfig
from .loader import load_and_merge_configs, resolve_config_options

__all__ = ["RenderConfig", "load_and_merge_configs", "resolve_config_options"]
