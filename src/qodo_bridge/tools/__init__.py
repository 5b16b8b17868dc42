"""Host-callable tools."""

from qodo_bridge.tools.agents import create_agent_tool, create_chain_tool
from qodo_bridge.tools.generation import create_chat_tool, create_generate_tool, create_review_tool
from qodo_bridge.tools.info import create_config_tool, create_models_tool, create_status_tool
from qodo_bridge.tools.registry import ToolDescriptor, ToolRegistry

__all__ = [
    "ToolDescriptor",
    "ToolRegistry",
    "create_agent_tool",
    "create_chain_tool",
    "create_chat_tool",
    "create_config_tool",
    "create_generate_tool",
    "create_models_tool",
    "create_review_tool",
    "create_status_tool",
]
