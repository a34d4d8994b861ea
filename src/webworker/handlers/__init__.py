"""
=============================================================================
HANDLERS MODULE
=============================================================================

Body producers for the worker.

    content.py    ContentWriter    home page, files, and the 404 page
    template.py   TemplatePage     {{cs371date}} / {{cs371server}} substitution

=============================================================================
"""

from .content import ContentWriter, ERROR_FRAGMENT
from .template import (
    TemplatePage,
    render_template,
    format_page_date,
    server_identity,
    DATE_TOKEN,
    SERVER_TOKEN,
)

__all__ = [
    "ContentWriter",
    "ERROR_FRAGMENT",
    "TemplatePage",
    "render_template",
    "format_page_date",
    "server_identity",
    "DATE_TOKEN",
    "SERVER_TOKEN",
]
