import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

REQUEST_ID_HEADER = "X-Request-ID"

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Attributes passed through ``extra=`` that end up in the JSON line
_EXTRA_FIELDS = ("method", "url", "path", "attempt", "retries", "delay_s", "status_code")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        rid = request_id_ctx.get()
        record.request_id = rid or "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        base: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z",
            "request_id": getattr(record, "request_id", "-"),
        }
        for field in _EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                base[field] = str(value) if field == "url" else value
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


def init_logging(debug: bool = False) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    level = logging.DEBUG if debug else logging.INFO
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    # httpx logs every request at INFO; our client logs retries itself
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


@contextmanager
def request_scope(request_id: Optional[str] = None) -> Iterator[str]:
    """Bind a request id for the enclosed block.

    An id already bound by an outer scope is kept unless one is passed in.
    """
    current = request_id_ctx.get()
    if request_id is None and current is not None:
        yield current
        return
    token = request_id_ctx.set(request_id or uuid.uuid4().hex[:12])
    try:
        yield request_id_ctx.get()  # type: ignore[misc]
    finally:
        request_id_ctx.reset(token)


async def request_context_middleware(request, call_next):  # type: ignore
    logger = logging.getLogger("licence_admin.request")
    with request_scope(request.headers.get(REQUEST_ID_HEADER)) as rid:
        logger.debug(
            "request start", extra={"method": request.method, "path": request.url.path}
        )
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        logger.debug("request end", extra={"status_code": response.status_code})
        return response
