import html
import logging
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_PATH = Path(__file__).parent / "templates" / "ui.html"


def load_template(path: Optional[str] = None) -> str:
    """Read status page template (placeholders: {{name}}, {{count}})"""

    template_path = Path(path) if path else DEFAULT_TEMPLATE_PATH
    logger.debug("Reading status page template %r...", str(template_path))
    return template_path.read_text(encoding="utf-8")


def render_status_page(template: str, endpoint_id: str, value: Any) -> str:
    return template.replace("{{name}}", html.escape(endpoint_id)).replace(
        "{{count}}", html.escape(str(value))
    )
