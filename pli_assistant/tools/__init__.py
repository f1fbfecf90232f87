"""Voice assistant tools: function schema and the call router"""
from pli_assistant.tools.declarations import build_policy_tools, policy_function_declarations
from pli_assistant.tools.router import ToolInvocationRouter

__all__ = [
    "build_policy_tools",
    "policy_function_declarations",
    "ToolInvocationRouter",
]
