import html
from pathlib import Path
from string import Template

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"


def render_template(template_name: str, **variables: str) -> str:
    """
    Render templates/email/<template_name>.html.

    Placeholders use $name syntax; values are HTML-escaped. Unknown
    placeholders are left as-is.
    """
    source = (TEMPLATE_DIR / f"{template_name}.html").read_text(encoding="utf-8")
    escaped = {key: html.escape(str(value), quote=True) for key, value in variables.items()}
    return Template(source).safe_substitute(escaped)
