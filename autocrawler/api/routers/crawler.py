from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from starlette.responses import Response
from pydantic import BaseModel

from autocrawler.domain.crawl_config import CrawlConfig, TraversalMode
from autocrawler.domain.run_status import RunStatus
from autocrawler.services.report_exporter import DEFAULT_FILENAME, format_bytes
from autocrawler.services.traversal_engine import TraversalEngine
from autocrawler.services.url_generator import auto_format_url, preview_url


class StartRequest(BaseModel):
    seed_url: str
    mode: str = TraversalMode.SINGLE.value
    page_limit: int = 5
    start_id: int = 1
    end_id: int = 3
    summarize: bool = False
    record_failures: bool = False


def _parse_mode(mode: str) -> TraversalMode:
    try:
        return TraversalMode(mode)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"unknown mode: {mode}")


def create_crawler_router(engine: TraversalEngine):
    router = APIRouter(prefix="/crawler", tags=["Crawler"])

    @router.post("/start", status_code=202)
    def start(req: StartRequest):
        cfg = CrawlConfig(
            seed_url=req.seed_url,
            mode=_parse_mode(req.mode),
            page_limit=req.page_limit,
            start_id=req.start_id,
            end_id=req.end_id,
            summarize=req.summarize,
            record_failures=req.record_failures,
        )
        state = engine.start(cfg)
        if state.status is RunStatus.ERROR:
            logs = state.logs
            raise HTTPException(status_code=400, detail=logs[-1].message if logs else "invalid configuration")
        return {"status": state.status.value, "snapshot": state.snapshot()}

    @router.post("/stop")
    def stop():
        if not engine.stop():
            raise HTTPException(status_code=409, detail="no running crawl")
        return {"status": RunStatus.PAUSED.value}

    @router.get("/status")
    def status():
        snap = engine.snapshot()
        snap["stats"]["total_size_display"] = format_bytes(snap["stats"]["total_size"])
        return snap

    @router.get("/logs")
    def logs(since: Optional[int] = Query(None, ge=0)):
        """Ordered run log; `since` skips entries already seen by the caller."""
        entries = engine.logs
        if since is not None:
            if since < 0:
                raise HTTPException(status_code=422, detail="since must be >= 0")
            entries = entries[since:]
        return [e.to_dict() for e in entries]

    @router.get("/pages")
    def pages():
        return [p.to_dict() for p in engine.pages]

    @router.get("/pages/{index}")
    def page(index: int):
        recorded = engine.pages
        if index < 0 or index >= len(recorded):
            raise HTTPException(status_code=404, detail="page not found")
        return recorded[index].to_dict()

    @router.get("/download")
    def download():
        data = engine.download_results()
        if data is None:
            raise HTTPException(status_code=404, detail="no data to download")
        return Response(
            content=data,
            media_type="text/plain; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{DEFAULT_FILENAME}"'},
        )

    @router.get("/url-tools/auto-format")
    def auto_format(url: str):
        formatted = auto_format_url(url)
        if formatted is None:
            raise HTTPException(status_code=422, detail="No numeric ID found at the end of URL to replace.")
        return {"url": formatted}

    @router.get("/url-tools/preview")
    def preview(url: str, mode: str = TraversalMode.SINGLE.value, start_id: int = 1):
        return {"url": preview_url(url, _parse_mode(mode), start_id)}

    return router
