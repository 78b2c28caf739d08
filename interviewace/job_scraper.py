"""Fetch a job posting page and reduce it to readable text."""

import logging
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from interviewace.errors import InterviewAceError, ValidationError

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
}
TIMEOUT = 15
MIN_TEXT_CHARS = 100


class ScrapeFailed(InterviewAceError):
    status_code = 400
    public_message = "Failed to scrape job posting"


def validate_url(url) -> str:
    url = (url or "").strip() if isinstance(url, str) else ""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError.for_field("url", "must be a valid http(s) URL")
    return url


def html_to_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(["script", "style", "nav", "footer", "header", "noscript"]):
        element.decompose()
    return soup.get_text(separator="\n", strip=True)


def scrape_job_posting(url, session=None) -> str:
    """Job posting text for ``url``.

    Raises:
        ValidationError: not an http(s) URL.
        ScrapeFailed: the page could not be fetched or has too little text
            (usually a page that needs JavaScript).
    """
    url = validate_url(url)
    logger.info("Scraping job posting from: %s", url)
    http = session or requests
    try:
        response = http.get(url, headers=HEADERS, timeout=TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error("Failed to fetch %s: %s", url, e)
        raise ScrapeFailed(
            f"Unable to access {url}",
            details="Unable to access the provided URL. Please check the URL or paste the job description directly.",
        ) from e

    text = html_to_text(response.text)
    if len(text) < MIN_TEXT_CHARS:
        raise ScrapeFailed(
            f"Scraped text too short ({len(text)} chars)",
            details="The page returned too little text; it may require JavaScript. Paste the job description instead.",
        )
    logger.info("Scraped %d characters from URL", len(text))
    return text
