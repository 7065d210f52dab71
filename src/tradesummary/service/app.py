from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from tradesummary.config import Settings
from tradesummary.errors import LedgerError, RateUnavailable
from tradesummary.model import LedgerCsvParser
from tradesummary.reporting import (
    CachingRateLookup,
    ExchangeRateResolver,
    ExcelReportSink,
    NbpRateLookup,
    RateLookup,
    build_report,
    default_report_name,
)
from tradesummary.reporting.report_sink import XLSX_MEDIA_TYPE


def create_app(
    settings: Settings | None = None,
    lookup_factory: Callable[[], RateLookup] | None = None,
) -> FastAPI:
    """Build the HTTP app. `lookup_factory` is called once per request."""
    settings = settings or Settings()
    app = FastAPI(title="tradesummary", version="0.1.0")
    logger = logging.getLogger("tradesummary.service.api")

    def default_lookup() -> RateLookup:
        return NbpRateLookup(
            url_template=settings.rate_url_template,
            timeout=settings.request_timeout_seconds,
        )

    make_lookup = lookup_factory or default_lookup

    def generate(body: bytes, rid: str) -> bytes:
        ledger, parse_report = LedgerCsvParser().parse_bytes(body)
        parse_report.log_with(logger)
        resolver = ExchangeRateResolver(
            CachingRateLookup(make_lookup()),
            max_lookback_days=settings.max_lookback_days,
            home_currency=settings.home_currency,
        )
        rb, _ = build_report(ledger, resolver)
        logger.info("req_id=%s /parsing symbols=%d", rid, len(rb.symbols))
        return ExcelReportSink().render(rb)

    @app.middleware("http")
    async def _log_requests(request: Request, call_next):
        req_id = str(uuid.uuid4())
        start = time.perf_counter()
        request.state.req_id = req_id
        try:
            response = await call_next(request)
            dur_ms = (time.perf_counter() - start) * 1000.0
            logger.info(
                "req_id=%s %s %s status=%s dur_ms=%.2f",
                req_id,
                request.method,
                request.url.path,
                response.status_code,
                dur_ms,
            )
            return response
        except Exception:
            dur_ms = (time.perf_counter() - start) * 1000.0
            logger.exception(
                "req_id=%s %s %s failed after %.2f ms",
                req_id,
                request.method,
                request.url.path,
                dur_ms,
            )
            raise

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.post("/parsing")
    async def parsing(request: Request):
        rid = getattr(request.state, "req_id", "-")
        body = await request.body()
        logger.info("req_id=%s /parsing bytes=%d", rid, len(body))
        try:
            content = await run_in_threadpool(generate, body, rid)
        except LedgerError as exc:
            logger.warning("req_id=%s /parsing rejected: %s", rid, exc)
            return JSONResponse(
                status_code=422,
                content={
                    "detail": "invalid trade rows",
                    "errors": [
                        {"line": f.line_no, "reason": f.reason} for f in exc.failures
                    ],
                },
            )
        except RateUnavailable as exc:
            logger.error("req_id=%s /parsing rate lookup exhausted: %s", rid, exc)
            return JSONResponse(status_code=502, content={"detail": str(exc)})
        except ValueError as exc:
            # e.g. an empty upload without a header row
            return JSONResponse(status_code=400, content={"detail": str(exc)})

        filename = default_report_name()
        return Response(
            content=content,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app
