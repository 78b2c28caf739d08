"""HTML -> PDF via headless Chromium (Playwright sync API).

The sync API blocks, so async callers run ``html_to_pdf`` in a worker thread
(``loop.run_in_executor``). A browser is launched per render and always shut
down again, whatever happens while printing.
"""

import logging
import os
import time
from contextlib import contextmanager

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from interviewace.errors import EngineUnavailable, PdfEngineError, RenderTimeout

logger = logging.getLogger(__name__)

PRODUCT_NAME = "InterviewAce"

EXECUTABLE_ENV_VARS = (
    "PLAYWRIGHT_CHROMIUM_EXECUTABLE_PATH",
    "PUPPETEER_EXECUTABLE_PATH",
    "CHROME_PATH",
    "GOOGLE_CHROME_BIN",
)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-first-run",
    "--no-zygote",
]

DEFAULT_TIMEOUT_MS = 30_000

PREVIEW_MARGIN = {"top": "10mm", "right": "10mm", "bottom": "10mm", "left": "10mm"}
FINAL_MARGIN = {"top": "20mm", "right": "15mm", "bottom": "20mm", "left": "15mm"}

HEADER_TEMPLATE = (
    '<div style="font-size:8px;color:#9ca3af;width:100%;padding:0 15mm;text-align:right;">'
    f"{PRODUCT_NAME}</div>"
)
FOOTER_TEMPLATE = (
    '<div style="font-size:8px;color:#9ca3af;width:100%;text-align:center;">'
    'Page <span class="pageNumber"></span> of <span class="totalPages"></span></div>'
)


def executable_path():
    """First configured browser binary, or None for Playwright's bundled Chromium."""
    for name in EXECUTABLE_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None


def render_timeout_ms(timeout_ms=None) -> int:
    if timeout_ms:
        return int(timeout_ms)
    try:
        return int(os.environ.get("PDF_RENDER_TIMEOUT_MS", DEFAULT_TIMEOUT_MS))
    except ValueError:
        return DEFAULT_TIMEOUT_MS


@contextmanager
def browser_session():
    """Yield a launched Chromium browser; close it and stop Playwright on exit."""
    try:
        playwright = sync_playwright().start()
    except PlaywrightError as e:
        raise EngineUnavailable(f"Playwright failed to start: {e}") from e

    browser = None
    try:
        path = executable_path()
        try:
            browser = playwright.chromium.launch(headless=True, args=LAUNCH_ARGS, executable_path=path)
        except PlaywrightError as e:
            logger.error("Chromium launch failed (executable=%s): %s", path or "bundled", e)
            raise EngineUnavailable(f"Browser launch failed: {e}") from e
        yield browser
    finally:
        if browser is not None:
            try:
                browser.close()
            except PlaywrightError as e:
                logger.warning("Browser close failed: %s", e)
        playwright.stop()


def html_to_pdf(html: str, landscape: bool = False, preview: bool = False, timeout_ms=None) -> bytes:
    """Print ``html`` to an A4 PDF and return the bytes.

    Args:
        html: complete HTML document.
        landscape: landscape orientation.
        preview: narrow preview margins instead of the final print margins.
        timeout_ms: settle/print deadline (default ``PDF_RENDER_TIMEOUT_MS`` or 30s).

    Raises:
        EngineUnavailable: Chromium could not be launched.
        RenderTimeout: the page did not settle before the deadline.
        PdfEngineError: any other browser failure.
    """
    timeout = render_timeout_ms(timeout_ms)
    start = time.time()
    with browser_session() as browser:
        try:
            page = browser.new_page()
            page.set_default_timeout(timeout)
            page.set_content(html, wait_until="networkidle", timeout=timeout)
            pdf_bytes = page.pdf(
                format="A4",
                landscape=landscape,
                print_background=True,
                display_header_footer=True,
                header_template=HEADER_TEMPLATE,
                footer_template=FOOTER_TEMPLATE,
                margin=PREVIEW_MARGIN if preview else FINAL_MARGIN,
            )
        except PlaywrightTimeoutError as e:
            logger.error("PDF render timed out after %dms: %s", timeout, e)
            raise RenderTimeout(f"Render timed out after {timeout}ms") from e
        except PlaywrightError as e:
            logger.error("PDF render failed: %s", e)
            raise PdfEngineError(f"Browser error: {e}") from e

    if not pdf_bytes:
        raise PdfEngineError("Browser returned an empty PDF")
    logger.info("PDF rendered: %d bytes in %.1fs", len(pdf_bytes), time.time() - start)
    return pdf_bytes
