"""Report Worker: background jobs for premium report delivery and emails.

Jobs:
  generate-report: build + print the report; premium users then get a
                    send-report job that emails the PDF
  send-report:     email a finished PDF as an attachment
  send-welcome:    welcome / premium-welcome email

Status flow:
  waiting → active → completed
                   → failed

Jobs run on worker threads in submission (FIFO) order. Job state lives in
memory; ``get(job_id)`` returns a snapshot safe to serialise. Only the most
recent ``keep_finished`` completed or failed jobs are kept; older ones are
forgotten and answer like unknown ids.
"""

from __future__ import annotations

import collections
import datetime
import logging
import queue
import threading
import uuid

from interviewace.email_service import send_email
from interviewace.report_model import derive_title, unwrap_preparation
from interviewace.report_service import generate_pdf_report

logger = logging.getLogger(__name__)

GENERATE_REPORT = "generate-report"
SEND_REPORT = "send-report"
SEND_WELCOME = "send-welcome"

_STOP = object()

KEEP_FINISHED = 1000


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


class JobDispatcher:
    """Job submission interface the HTTP layer depends on."""

    def submit(self, name: str, data: dict, owner: str | None = None) -> str:
        raise NotImplementedError

    def get(self, job_id: str) -> dict | None:
        raise NotImplementedError

    def set_progress(self, job_id: str, progress: int):
        """Handlers report progress (0-100); dispatchers without tracking ignore it."""

    def shutdown(self, wait: bool = True):
        """Stop accepting work and release workers."""


class ThreadJobDispatcher(JobDispatcher):
    """Runs registered handlers on daemon worker threads.

    A handler is ``handler(dispatcher, job_id, data) -> result``; it may
    submit follow-up jobs through ``dispatcher``. An exception marks the job
    failed with the error recorded; it is logged, never re-raised into the
    worker loop.
    """

    def __init__(self, handlers: dict | None = None, workers: int = 1, keep_finished: int = KEEP_FINISHED):
        self.handlers = dict(handlers if handlers is not None else default_handlers())
        self.keep_finished = max(1, keep_finished)
        self._lock = threading.Lock()
        self._jobs: dict[str, dict] = {}
        self._finished: collections.deque = collections.deque()
        self._queue: queue.Queue = queue.Queue()
        self._threads = []
        self._closed = False
        for i in range(max(1, workers)):
            thread = threading.Thread(target=self._worker_loop, name=f"report-worker-{i}", daemon=True)
            thread.start()
            self._threads.append(thread)

    def submit(self, name: str, data: dict, owner: str | None = None) -> str:
        if name not in self.handlers:
            raise ValueError(f"Unknown job type: {name}")
        with self._lock:
            if self._closed:
                raise RuntimeError("Dispatcher is shut down")
            job_id = uuid.uuid4().hex
            self._jobs[job_id] = {
                "id": job_id,
                "name": name,
                "owner": owner,
                "state": "waiting",
                "progress": 0,
                "created_at": _now(),
                "processed_at": None,
                "finished_at": None,
                "result": None,
                "error": None,
            }
        self._queue.put((job_id, name, data))
        logger.info("[ReportWorker] Queued %s job %s", name, job_id)
        return job_id

    def get(self, job_id: str) -> dict | None:
        with self._lock:
            job = self._jobs.get(job_id)
            return dict(job) if job else None

    def set_progress(self, job_id: str, progress: int):
        with self._lock:
            if job_id in self._jobs:
                self._jobs[job_id]["progress"] = max(0, min(100, int(progress)))

    def _update(self, job_id: str, **fields):
        with self._lock:
            self._jobs[job_id].update(fields)
            if fields.get("state") in ("completed", "failed"):
                self._finished.append(job_id)
                while len(self._finished) > self.keep_finished:
                    self._jobs.pop(self._finished.popleft(), None)

    def _worker_loop(self):
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._run(*item)
            finally:
                self._queue.task_done()

    def _run(self, job_id: str, name: str, data: dict):
        self._update(job_id, state="active", processed_at=_now())
        logger.info("[ReportWorker] Processing %s job %s", name, job_id)
        try:
            result = self.handlers[name](self, job_id, data)
        except Exception as e:
            logger.exception("[ReportWorker] %s job %s failed: %s", name, job_id, e)
            self._update(job_id, state="failed", error=str(e) or type(e).__name__, finished_at=_now())
            return
        self._update(job_id, state="completed", progress=100, result=result, finished_at=_now())
        logger.info("[ReportWorker] %s job %s completed", name, job_id)

    def join(self):
        """Block until every queued job has run."""
        self._queue.join()

    def shutdown(self, wait: bool = True):
        with self._lock:
            if self._closed:
                return
            self._closed = True
        for _ in self._threads:
            self._queue.put(_STOP)
        if wait:
            for thread in self._threads:
                thread.join(timeout=30)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def make_generate_report(render_pdf=generate_pdf_report):
    def generate_report(dispatcher: JobDispatcher, job_id: str, data: dict) -> dict:
        preparation = data.get("preparation") or {}
        is_premium = bool(data.get("is_premium"))
        dispatcher.set_progress(job_id, 10)
        pdf_bytes = render_pdf(preparation, is_premium=is_premium)
        dispatcher.set_progress(job_id, 80)
        if is_premium and data.get("email"):
            prep = unwrap_preparation(preparation)
            dispatcher.submit(SEND_REPORT, {
                "email": data["email"],
                "preparation_title": data.get("title") or derive_title(prep),
                "pdf": pdf_bytes,
            }, owner=data.get("user_id"))
        return {"success": True, "size": len(pdf_bytes)}

    return generate_report


def make_send_report(send=send_email):
    def send_report(dispatcher: JobDispatcher, job_id: str, data: dict) -> dict:
        title = data.get("preparation_title") or "Interview Preparation"
        message_id = send(
            data["email"],
            f"Your InterviewAce report: {title}",
            "report_ready",
            {"preparation_title": title},
            attachments=[("interview-preparation-report.pdf", data["pdf"])],
        )
        return {"success": True, "message_id": message_id}

    return send_report


def make_send_welcome(send=send_email):
    def send_welcome(dispatcher: JobDispatcher, job_id: str, data: dict) -> dict:
        premium = bool(data.get("premium"))
        message_id = send(
            data["email"],
            "Welcome to InterviewAce Premium!" if premium else "Welcome to InterviewAce!",
            "premium_welcome" if premium else "welcome",
            {"name": data.get("name") or ""},
        )
        return {"success": True, "message_id": message_id}

    return send_welcome


def default_handlers(render_pdf=generate_pdf_report, send=send_email) -> dict:
    return {
        GENERATE_REPORT: make_generate_report(render_pdf),
        SEND_REPORT: make_send_report(send),
        SEND_WELCOME: make_send_welcome(send),
    }
