from typing import Any, Dict, Optional

from jinja2 import Environment
from markupsafe import Markup

# autoescape on: every {{ value }} is entity-escaped, template literal markup is kept.
_HTML_ENV = Environment(autoescape=True, keep_trailing_newline=False)


def render_html(template_text: str, variables: Optional[Dict[str, Any]] = None) -> str:
    return _HTML_ENV.from_string(template_text).render(**(variables or {}))


def join_html(*parts: Any) -> str:
    """Concatenate already-rendered fragments without escaping them again."""
    return str(Markup("").join(Markup(p) for p in parts if p))


def truncate(s: str, n: int, suffix: str = "...") -> str:
    if len(s) <= n:
        return s
    return s[:n] + suffix
