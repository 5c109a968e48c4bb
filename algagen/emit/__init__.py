"""Rendering of implementation stubs and property-test matrices."""

from .matrix import GuardPolicy, generate, render_tests
from .stubs import emit, render_stubs

__all__ = ["GuardPolicy", "emit", "generate", "render_stubs", "render_tests"]
