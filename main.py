"""InterviewAce — report command line

Renders an interview preparation report without running the API server:
  1. Load a preparation (JSON file, wrapped or direct shape) or the sample
  2. Build the report model
  3. Write HTML and/or print a PDF with headless Chromium

Usage:
    python main.py --sample --html report.html
    python main.py --prep-file prep.json --pdf report.pdf --premium
    python main.py --grant-premium USER_ID
"""

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger("interviewace")


def load_preparation(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def grant_premium(user_id: str):
    from web import config
    from web.preparation_store import PreparationStore

    store = PreparationStore(config.PREPARATIONS_FILE)
    store.set_premium(user_id, True)
    logger.info("Granted premium to %s (%s)", user_id, config.PREPARATIONS_FILE)


def render(preparation: dict, html_path: str | None, pdf_path: str | None, premium: bool, debug: bool):
    from interviewace.errors import InterviewAceError
    from interviewace.report_model import normalize_request_payload
    from interviewace.report_service import generate_pdf_report, render_preparation_html

    prep, options = normalize_request_payload(preparation)
    is_premium = premium or options["is_premium"]
    try:
        if html_path:
            html = render_preparation_html(prep, is_premium=is_premium, debug=debug)
            with open(html_path, "w", encoding="utf-8") as f:
                f.write(html)
            logger.info("HTML report written: %s (%d chars)", html_path, len(html))
        if pdf_path:
            pdf_bytes = generate_pdf_report(prep, is_premium=is_premium)
            with open(pdf_path, "wb") as f:
                f.write(pdf_bytes)
            logger.info("PDF report written: %s (%d bytes)", pdf_path, len(pdf_bytes))
    except InterviewAceError as e:
        logger.error("%s: %s", e.public_message, e)
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(description="InterviewAce — preparation report renderer")
    parser.add_argument("--prep-file", type=str, help="Path to a preparation JSON file")
    parser.add_argument("--sample", action="store_true", help="Render the built-in sample preparation")
    parser.add_argument("--html", type=str, help="Write the HTML report to this path")
    parser.add_argument("--pdf", type=str, help="Write the PDF report to this path")
    parser.add_argument("--premium", action="store_true", help="Render without the free-tier watermark")
    parser.add_argument("--debug", action="store_true", help="Append the report model as JSON to the HTML")
    parser.add_argument("--grant-premium", type=str, metavar="USER_ID", help="Mark a user as premium in the store")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose/debug logging")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.grant_premium:
        grant_premium(args.grant_premium)
        return

    if not (args.prep_file or args.sample) or not (args.html or args.pdf):
        parser.print_help()
        return

    if args.sample:
        from interviewace.sample_data import sample_preparation

        preparation = sample_preparation()
    else:
        if not os.path.exists(args.prep_file):
            logger.error("Preparation file not found: %s", args.prep_file)
            sys.exit(1)
        try:
            preparation = load_preparation(args.prep_file)
        except (json.JSONDecodeError, ValueError) as e:
            logger.error("Invalid preparation file %s: %s", args.prep_file, e)
            sys.exit(1)

    render(preparation, args.html, args.pdf, args.premium, args.debug)


if __name__ == "__main__":
    main()
