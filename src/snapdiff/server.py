"""Review web server: serve the report and accept selected cases."""

from __future__ import annotations

import dataclasses
import logging

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from snapdiff.diff.dirs import DirDiffConfig, accept_pairs, create_diff
from snapdiff.errors import SnapdiffError
from snapdiff.report import ReportConfig, render_html_report

log = logging.getLogger(__name__)

DEFAULT_PORT = 7200


class UpdateParams(BaseModel):
    accepted_names: list[str]


def create_app(diff_config: DirDiffConfig, report_config: ReportConfig) -> FastAPI:
    """Build the review application.

    The page is re-rendered on every request, so accepted cases disappear
    after a reload.
    """
    report_config = dataclasses.replace(report_config, is_review=True, embed_images=True)
    app = FastAPI(title="snapdiff review")

    @app.get("/", response_class=HTMLResponse)
    def index() -> HTMLResponse:
        try:
            diff = create_diff(diff_config)
            return HTMLResponse(render_html_report(report_config, diff.results))
        except SnapdiffError as exc:
            log.error("cannot render review page: %s", exc)
            return HTMLResponse(str(exc), status_code=500)

    @app.post("/update")
    def update(params: UpdateParams) -> dict[str, int]:
        try:
            copied = accept_pairs(diff_config, params.accepted_names)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except SnapdiffError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return {"accepted": len(copied)}

    return app


def run_review_server(
    diff_config: DirDiffConfig,
    report_config: ReportConfig,
    *,
    host: str = "127.0.0.1",
    port: int = DEFAULT_PORT,
) -> None:
    """Run the review server until interrupted."""
    import uvicorn

    app = create_app(diff_config, report_config)
    log.info("running at http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level="warning")
