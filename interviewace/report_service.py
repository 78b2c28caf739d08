"""Report pipeline: preparation -> ReportData -> HTML -> PDF."""

import logging

from interviewace import pdf_engine
from interviewace.renderer import render_report
from interviewace.report_model import prepare_model

logger = logging.getLogger(__name__)


def render_preparation_html(preparation: dict, show_generate_button: bool = False,
                            is_premium: bool = False, debug: bool = False, now=None) -> str:
    report = prepare_model(
        preparation,
        show_generate_button=show_generate_button,
        is_premium=is_premium,
        now=now,
    )
    return render_report(report, debug=debug)


def generate_pdf_report(preparation: dict, is_premium: bool = False, landscape: bool = False,
                        preview: bool = False, now=None) -> bytes:
    """Full pipeline for one preparation. Blocking; run it off the event loop.

    The printed report never carries the in-preview "Generate PDF" button.
    """
    html = render_preparation_html(preparation, show_generate_button=False, is_premium=is_premium, now=now)
    logger.info("Printing report (%d chars of HTML, premium=%s)", len(html), is_premium)
    return pdf_engine.html_to_pdf(html, landscape=landscape, preview=preview)
