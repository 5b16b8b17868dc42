"""qodo-bridge - run the qodo CLI from a host coding assistant."""

from qodo_bridge.auth import QodoApiKey, create_api_key, is_authenticated, list_api_keys, revoke_api_key
from qodo_bridge.cli_runner import InvocationOptions, InvocationResult, QodoCli
from qodo_bridge.config import ConfigStore, PluginSettings, QodoConfig, get_config_path, load_config, save_config
from qodo_bridge.lazy import SharedCell
from qodo_bridge.models import QODO_MODELS, ModelInfo, get_all_models, get_model_by_id, get_models_by_provider
from qodo_bridge.plugin import QodoPlugin

__version__ = "0.1.0"

__all__ = [
    "QODO_MODELS",
    "ConfigStore",
    "InvocationOptions",
    "InvocationResult",
    "ModelInfo",
    "PluginSettings",
    "QodoApiKey",
    "QodoCli",
    "QodoConfig",
    "QodoPlugin",
    "SharedCell",
    "create_api_key",
    "get_all_models",
    "get_config_path",
    "get_model_by_id",
    "get_models_by_provider",
    "is_authenticated",
    "list_api_keys",
    "load_config",
    "revoke_api_key",
    "save_config",
]
