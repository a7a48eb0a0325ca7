"""Post-processing applied to generated pages."""

from .inject import MarkupInjector, build_snippets, inject
from .sanitize import ContentSanitizer, sanitize

__all__ = ["ContentSanitizer", "MarkupInjector", "build_snippets", "inject", "sanitize"]
