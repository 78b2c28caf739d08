"""Report renderer: ReportData -> self-contained HTML.

The report template lives in ``interviewace/templates/report.html``; set
``REPORT_TEMPLATE_DIR`` to render from a different directory. Helpers mirror
the ones the report template has always relied on, with JavaScript truthiness
for ``or_``/``and_`` so report data coming from the browser renders the same
way it previews.
"""

import json
import logging
import math
import os
from functools import lru_cache
from pathlib import Path

import jinja2

from interviewace.errors import TemplateUnavailable

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "report.html"
TEMPLATE_VERSION = "2024.06"
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

FREE_TIER_MARKER = "Generated with InterviewAce Free"
BULLET = "• "


def is_truthy(value) -> bool:
    if value is None or value is False or isinstance(value, jinja2.Undefined):
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    if isinstance(value, str):
        return value != ""
    return True


def eq(a, b) -> bool:
    """Strict equality: ``1`` and ``"1"`` differ, as do ``1`` and ``True``."""
    return type(a) is type(b) and a == b


def or_(a, b):
    return a if is_truthy(a) else b


def and_(a, b):
    return b if is_truthy(a) else a


def to_json(value) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def format_list(items) -> str:
    if not isinstance(items, (list, tuple)):
        return ""
    lines = [f"{BULLET}{str(item).strip()}" for item in items if item is not None and str(item).strip()]
    return "\n".join(lines)


def compact(value):
    """Drop JS-falsy values and empty containers, recursively."""
    if isinstance(value, dict):
        out = {}
        for key, item in value.items():
            item = compact(item)
            if is_truthy(item) and item != {} and item != []:
                out[key] = item
        return out
    if isinstance(value, (list, tuple)):
        out = []
        for item in value:
            item = compact(item)
            if is_truthy(item) and item != {} and item != []:
                out.append(item)
        return out
    if isinstance(value, str) and not value.strip():
        return ""
    return value


def has_content(value) -> bool:
    return isinstance(value, dict) and len(value) > 0


def template_dir() -> Path:
    return Path(os.environ.get("REPORT_TEMPLATE_DIR") or DEFAULT_TEMPLATE_DIR)


@lru_cache(maxsize=4)
def _environment(directory: str) -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(directory),
        autoescape=jinja2.select_autoescape(["html", "xml"]),
        undefined=jinja2.Undefined,
        keep_trailing_newline=True,
    )
    env.filters.update(
        format_list=format_list,
        to_json=to_json,
        compact=compact,
    )
    env.globals.update(
        eq=eq,
        or_=or_,
        and_=and_,
        has_content=has_content,
        compact=compact,
        format_list=format_list,
        FREE_TIER_MARKER=FREE_TIER_MARKER,
        TEMPLATE_VERSION=TEMPLATE_VERSION,
    )
    return env


def get_template(name: str = TEMPLATE_NAME) -> jinja2.Template:
    directory = str(template_dir())
    try:
        return _environment(directory).get_template(name)
    except jinja2.TemplateNotFound as e:
        logger.error("Report template '%s' not found in %s", name, directory)
        raise TemplateUnavailable(f"Template not found: {e}") from e
    except jinja2.TemplateSyntaxError as e:
        logger.error("Report template '%s' failed to compile: %s (line %s)", name, e.message, e.lineno)
        raise TemplateUnavailable(f"Template syntax error: {e}") from e
    except OSError as e:
        logger.error("Report template '%s' could not be read: %s", name, e)
        raise TemplateUnavailable(str(e)) from e


def render_report(report: dict, debug: bool = False) -> str:
    """Render ReportData (from ``prepare_model``) into one HTML document.

    Raises:
        TemplateUnavailable: the template cannot be loaded or compiled.
    """
    template = get_template()
    html = template.render(report=report, debug=debug)
    logger.debug("Rendered report '%s' (%d chars)", report.get("title", ""), len(html))
    return html
