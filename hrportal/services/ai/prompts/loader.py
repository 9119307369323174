"""
Prompt loader

Loads YAML prompt files, caches them and fills {variable} placeholders.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml
from loguru import logger

from hrportal.core.config import settings


class PromptLoader:
    """
    YAML prompt loader

    Supports:
    - one YAML file per functional area
    - {variable} substitution
    - in-memory cache, optionally bypassed (hot reload in development)
    """

    def __init__(self, base_path: Path | str | None = None, hot_reload: bool = False):
        """
        Args:
            base_path: directory holding the YAML files, defaults to this package
            hot_reload: re-read files on every access
        """
        if base_path is None:
            base_path = Path(__file__).parent
        self.base_path = Path(base_path)
        self.hot_reload = hot_reload
        self._cache: Dict[str, Dict[str, Any]] = {}

    def load(self, prompt_file: str) -> Dict[str, Any]:
        """
        Load one YAML file

        Args:
            prompt_file: file name without the .yaml suffix

        Raises:
            FileNotFoundError: no such file
            yaml.YAMLError: invalid YAML
        """
        if not self.hot_reload and prompt_file in self._cache:
            return self._cache[prompt_file]

        file_path = self.base_path / f"{prompt_file}.yaml"
        if not file_path.exists():
            raise FileNotFoundError(f"Prompt file not found: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            self._cache[prompt_file] = data
            return data
        except yaml.YAMLError as e:
            logger.error("Failed to parse YAML {}: {}", file_path, e)
            raise

    def _lookup(self, prompt_file: str, key: str) -> Any:
        value: Any = self.load(prompt_file)
        for part in key.split("."):
            if not isinstance(value, dict):
                raise KeyError(f"Cannot access '{key}' in {prompt_file}: intermediate value is not a mapping")
            if part not in value:
                raise KeyError(f"Prompt key not found: {prompt_file}.{key}")
            value = value[part]
        return value

    def get(self, prompt_file: str, key: str, **kwargs) -> str:
        """
        Fetch a prompt and fill its placeholders

        Args:
            prompt_file: file name without the .yaml suffix
            key: prompt key, dotted for nested keys ("system.analyst")
            **kwargs: placeholder values
        """
        value = self._lookup(prompt_file, key)
        if not isinstance(value, str):
            raise TypeError(f"Expected a string prompt but {prompt_file}.{key} is {type(value).__name__}")

        # always formatted so literal braces can be written as {{ }}
        try:
            return value.format(**kwargs)
        except KeyError as e:
            logger.warning("Missing prompt variable: {} in {}.{}", e, prompt_file, key)
            return value

    def get_config(self, prompt_file: str, key: str | None = None) -> Any:
        """Non-prompt value, or the whole file when key is None"""
        if key is None:
            return self.load(prompt_file)
        return self._lookup(prompt_file, key)

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.debug("Prompt cache cleared")


# ========== Module-level singleton ==========

_loader: PromptLoader | None = None


def get_prompt_loader(hot_reload: bool | None = None) -> PromptLoader:
    """
    Global PromptLoader

    Args:
        hot_reload: None follows PROMPT_HOT_RELOAD, else on in development
    """
    global _loader
    if _loader is None:
        if hot_reload is None:
            hot_reload = settings.prompt_hot_reload
        if hot_reload is None:
            hot_reload = settings.is_development
        _loader = PromptLoader(hot_reload=hot_reload)
    return _loader


def get_prompt(prompt_file: str, key: str, **kwargs) -> str:
    """
    Formatted prompt

    Example:
        >>> prompt = get_prompt("skills", "assessment_user", employee_profile="...")
    """
    return get_prompt_loader().get(prompt_file, key, **kwargs)


def get_config(prompt_file: str, key: str | None = None) -> Any:
    """
    Config value stored next to the prompts

    Example:
        >>> fallback = get_config("jd_intelligence", "fallbacks.jd_optimization")
    """
    return get_prompt_loader().get_config(prompt_file, key)
