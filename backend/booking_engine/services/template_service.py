# backend/booking_engine/services/template_service.py
"""
Template rendering service.

Provides centralized Jinja2 rendering for email bodies, with the common
context (brand, year, links) merged into every render.
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from ..core.config import Settings
from ..core.constants import BRAND_NAME, NO_REASON_PROVIDED
from .base import BaseService

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


class TemplateService(BaseService):
    """
    Centralized template rendering service using Jinja2.

    Uses dependency injection - construct one per application and share it;
    the Jinja2 environment is thread-safe for rendering.
    """

    def __init__(self, settings: Settings, template_dir: Optional[Path] = None):
        super().__init__()
        self.settings = settings
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._register_custom_filters()

    def _register_custom_filters(self) -> None:
        def currency(value: Union[Decimal, float, None]) -> str:
            if value is None:
                return "-"
            return f"₹{Decimal(value):,.2f}"

        def format_date(value: Union[datetime, str], format_str: str = "%B %d, %Y") -> str:
            if isinstance(value, str):
                return value
            return value.strftime(format_str)

        self.env.filters["currency"] = currency
        self.env.filters["format_date"] = format_date

    def get_common_context(self) -> Dict[str, Any]:
        return {
            "brand_name": BRAND_NAME,
            "current_year": datetime.now().year,
            "frontend_url": self.settings.frontend_url,
            "support_email": self.settings.email_from_address,
            "no_reason_text": NO_REASON_PROVIDED,
        }

    @BaseService.measure_operation("render_template")
    def render_template(self, template_name: str, context: Optional[Dict[str, Any]] = None, **kwargs: Any) -> str:
        """
        Render a template with the given context.

        Raises:
            TemplateNotFound: If template doesn't exist
        """
        try:
            template = self.env.get_template(template_name)
            full_context = self.get_common_context()
            if context:
                full_context.update(context)
            full_context.update(kwargs)
            return template.render(full_context)
        except TemplateNotFound:
            self.logger.error(f"Template not found: {template_name}")
            raise
        except Exception as e:
            self.logger.error(f"Error rendering template {template_name}: {str(e)}")
            raise
