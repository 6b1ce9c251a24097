# src/spoof_detection/app.py

from functools import lru_cache
import logging
import sys

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from .config import configure_logging, load_settings
from .detector import Detector
from .errors import ParseError, ResolverInitError
from .protocol_checks import DnsRecordFetcher, RecordFetcher

logger = logging.getLogger(__name__)

app = FastAPI(title="Email Spoofing Detection API",
              description="Grades a message or sending domain using SPF, DKIM presence and DMARC records",
              version="0.2.0")


class AnalyzeRequest(BaseModel):
    raw_email: str


@lru_cache(maxsize=1)
def get_fetcher() -> RecordFetcher:
    """One shared resolver per process; construction errors are retried on the next request."""
    return DnsRecordFetcher(load_settings())


def get_detector(fetcher: RecordFetcher = Depends(get_fetcher)) -> Detector:
    return Detector(fetcher)


@app.exception_handler(ParseError)
async def parse_error_handler(request: Request, exc: ParseError):
    return JSONResponse({"error": f"Failed to parse email: {exc}"}, status_code=400)


@app.exception_handler(ResolverInitError)
async def resolver_error_handler(request: Request, exc: ResolverInitError):
    logger.error("DNS resolver unavailable: %s", exc)
    return JSONResponse({"error": f"DNS resolver error: {exc}"}, status_code=500)


@app.get("/", include_in_schema=False)
def root_redirect():
    return RedirectResponse(url="/docs")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/analyze")
def analyze(req: AnalyzeRequest, detector: Detector = Depends(get_detector)):
    """Analyse a message passed as plain text in ``raw_email``."""
    result = detector.analyze_raw(req.raw_email.encode("utf-8"))
    return JSONResponse(result.to_dict())


@app.post("/analyze/file")
async def analyze_file(file: UploadFile = File(...), detector: Detector = Depends(get_detector)):
    """Upload a .eml file and analyse it."""
    raw = await file.read()
    result = await run_in_threadpool(detector.analyze_raw, raw)
    return JSONResponse(result.to_dict())


@app.get("/domain/{domain}")
def domain_report(domain: str, detector: Detector = Depends(get_detector)):
    """Grade the SPF/DKIM/DMARC posture of a bare domain."""
    return JSONResponse(detector.analyze_domain(domain).to_dict())


def main() -> None:
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    logger.info("Starting Email Spoof Analysis Service")
    try:
        get_fetcher()
    except ResolverInitError as e:
        logger.error("%s", e)
        sys.exit(1)
    logger.info("Binding to %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, timeout_keep_alive=75)


if __name__ == "__main__":
    main()
