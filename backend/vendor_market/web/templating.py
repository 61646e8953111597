from pathlib import Path

from fastapi.templating import Jinja2Templates

from vendor_market.core.config import settings
from vendor_market.services.email import format_event_date

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
templates.env.globals["site_name"] = settings.PROJECT_NAME
templates.env.filters["event_date"] = format_event_date
