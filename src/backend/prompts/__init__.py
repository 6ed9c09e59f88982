"""
提示词模板（YAML + Jinja2）
"""

from .loader import PromptLoader, PromptLoadError, PromptRenderError, PromptTemplate, prompt_loader

__all__ = ["PromptLoader", "PromptLoadError", "PromptRenderError", "PromptTemplate", "prompt_loader"]
