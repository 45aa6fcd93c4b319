# backend/courtbook/services/template_service.py
"""
Template rendering for outbound messages.

Templates live under ``courtbook/templates``; HTML templates are
autoescaped, text templates are not.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class TemplateService:
    """Centralized Jinja2 rendering with a few shared filters."""

    def __init__(self, template_dir: Optional[Path] = None):
        self.env = Environment(
            loader=FileSystemLoader(template_dir or TEMPLATE_DIR),
            autoescape=select_autoescape(enabled_extensions=("html",)),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._register_custom_filters()

    def _register_custom_filters(self) -> None:
        def currency(value: Any) -> str:
            """Format a number as currency."""
            return f"${float(value):,.2f}"

        self.env.filters["currency"] = currency

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        template = self.env.get_template(template_name)
        return template.render(**context)
