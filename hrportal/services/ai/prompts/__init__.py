"""
Prompt files and their loader
"""

from .loader import PromptLoader, get_prompt, get_config, get_prompt_loader

__all__ = [
    "PromptLoader",
    "get_prompt",
    "get_config",
    "get_prompt_loader",
]
