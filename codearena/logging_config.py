import logging

from pythonjsonlogger.json import JsonFormatter

from codearena.config import LOG_LEVEL, SERVICE_NAME

CONTEXT_KEYS = (
    "request_id",
    "method",
    "path",
    "client",
    "user_id",
    "challenge_id",
    "question_id",
    "submission_id",
    "language",
    "stage",
)


class ContextDefaultsFilter(logging.Filter):
    """Ensure every record carries the same context keys and the service name.

    Keeps the JSON schema stable whether or not a call site passed `extra`.
    """

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for key in CONTEXT_KEYS:
            if not hasattr(record, key):
                setattr(record, key, None)
        if not hasattr(record, "status_code"):
            record.status_code = 0
        if not hasattr(record, "duration_ms"):
            record.duration_ms = 0
        if not hasattr(record, "service"):
            record.service = self.service_name
        return True


def setup_logging() -> None:
    """Configure the root logger to emit structured JSON logs to stdout."""
    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)

    handler = logging.StreamHandler()
    fmt = (
        "%(asctime)s %(levelname)s %(name)s %(message)s "
        "request_id=%(request_id)s method=%(method)s path=%(path)s "
        "status_code=%(status_code)s duration_ms=%(duration_ms)s client=%(client)s "
        "service=%(service)s user_id=%(user_id)s challenge_id=%(challenge_id)s "
        "question_id=%(question_id)s submission_id=%(submission_id)s "
        "language=%(language)s stage=%(stage)s"
    )
    formatter = JsonFormatter(
        fmt,
        rename_fields={
            "levelname": "level",
            "asctime": "time",
        },
    )
    handler.setFormatter(formatter)
    handler.addFilter(ContextDefaultsFilter(SERVICE_NAME))

    # Replace existing handlers to avoid duplicate output
    root.handlers.clear()
    root.addHandler(handler)
    logging.captureWarnings(True)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.propagate = True
