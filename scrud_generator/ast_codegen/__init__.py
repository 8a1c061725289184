"""
AST based rendering of artifact specifications to Python source.
"""

from .renderer import PythonRenderer, build_module, render_artifact, render_header

__all__ = [
    'PythonRenderer',
    'build_module',
    'render_artifact',
    'render_header',
]
