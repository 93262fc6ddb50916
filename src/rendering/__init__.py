"""Resume document rendering.

Public API:
    - DocxRenderer: Fills a Word template from a FinalResumeRecord
    - RenderedDocument: Path and fill report of a rendered file
    - RenderError: Missing template or backend failure
    - build_default_template: Writes a starter template
    - RenderConfig: Template and output settings
"""

from src.rendering.config import RenderConfig
from src.rendering.renderer import (
    BLOCK_PLACEHOLDERS,
    DocxRenderer,
    RenderedDocument,
    RenderError,
    build_default_template,
)

__all__ = [
    "DocxRenderer",
    "RenderedDocument",
    "RenderError",
    "RenderConfig",
    "BLOCK_PLACEHOLDERS",
    "build_default_template",
]
