"""HTTP query and export API."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Annotated

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .analysis import aggregate, analyze_costs, filter_by_date_range
from .analysis import aggregator as agg
from .analysis.costs import CostConfigStore
from .analysis.filters import filter_jobs, paginate, sort_jobs_newest_first
from .config import Config
from .outputs import (
    BOM,
    ReportContext,
    export_filename,
    list_reports,
    render_report,
)
from .store import SnapshotStore
from .watcher import LogWatcher

LOGGER = logging.getLogger(__name__)

StartDate = Annotated[date | None, Query(alias="startDate")]
EndDate = Annotated[date | None, Query(alias="endDate")]


def create_app(
    config: Config,
    snapshots: SnapshotStore | None = None,
    costs: CostConfigStore | None = None,
) -> FastAPI:
    app = FastAPI(title="CUPS Log Analyzer")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    snapshots = snapshots or SnapshotStore(
        config.page_log_path, config.fallback_log_path
    )
    costs = costs or CostConfigStore(config.costs_config_path)
    watcher = LogWatcher(config.page_log_path, snapshots.reload)
    app.state.snapshots = snapshots
    app.state.costs = costs
    app.state.watcher = watcher

    @app.on_event("startup")
    def startup() -> None:
        costs.load()
        snapshots.reload()
        if config.watch:
            watcher.start()

    @app.on_event("shutdown")
    def shutdown() -> None:
        watcher.stop()

    def _jobs(start_date: date | None, end_date: date | None):
        return filter_by_date_range(
            snapshots.snapshot().jobs, start_date, end_date
        )

    @app.get("/api/health")
    def api_health():
        current = snapshots.snapshot()
        return {
            "status": "ok",
            "jobs": current.total_jobs,
            "source": current.source,
            "lastUpdate": current.last_update.isoformat(),
        }

    @app.get("/api/stats")
    def api_stats(start_date: StartDate = None, end_date: EndDate = None):
        current = snapshots.snapshot()
        jobs = filter_by_date_range(current.jobs, start_date, end_date)
        return agg.summary(aggregate(jobs), last_update=current.last_update)

    @app.get("/api/users")
    def api_users(start_date: StartDate = None, end_date: EndDate = None):
        store = aggregate(_jobs(start_date, end_date))
        return [user.to_dict() for user in agg.users_by_prints(store)]

    @app.get("/api/printers")
    def api_printers(start_date: StartDate = None, end_date: EndDate = None):
        store = aggregate(_jobs(start_date, end_date))
        return [item.to_dict() for item in agg.printers_by_prints(store)]

    @app.get("/api/jobs")
    def api_jobs(
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=50, ge=1),
        user: str | None = None,
        printer: str | None = None,
        start_date: StartDate = None,
        end_date: EndDate = None,
    ):
        jobs = filter_jobs(_jobs(start_date, end_date), user, printer)
        result = paginate(sort_jobs_newest_first(jobs), page, limit)
        return {
            "jobs": [job.to_dict() for job in result.items],
            "total": result.total,
            "page": result.page,
            "totalPages": result.total_pages,
        }

    @app.get("/api/daily-stats")
    def api_daily_stats(
        start_date: StartDate = None, end_date: EndDate = None
    ):
        store = aggregate(_jobs(start_date, end_date))
        return [day.to_dict() for day in agg.daily_series(store)]

    @app.get("/api/hourly-stats")
    def api_hourly_stats(
        start_date: StartDate = None, end_date: EndDate = None
    ):
        store = aggregate(_jobs(start_date, end_date))
        return [hour.to_dict() for hour in agg.hourly_series(store)]

    @app.get("/api/costs/config")
    def api_costs_config():
        return costs.get().to_dict()

    @app.post("/api/costs/config")
    def api_costs_config_replace(payload: dict = Body(...)):
        printers = payload.get("printers")
        if not isinstance(printers, dict):
            raise HTTPException(
                status_code=422, detail="'printers' must be an object"
            )
        updated = costs.replace(printers)
        LOGGER.info(
            "Cost table replaced with %d printer(s)", len(updated.printers)
        )
        return {"success": True}

    @app.get("/api/costs/analysis")
    def api_costs_analysis(
        start_date: StartDate = None, end_date: EndDate = None
    ):
        analysis = analyze_costs(
            _jobs(start_date, end_date), costs.get(), start_date, end_date
        )
        return analysis.to_dict()

    @app.get("/api/export/{kind}")
    def api_export(
        kind: str,
        user: str | None = None,
        printer: str | None = None,
        start_date: StartDate = None,
        end_date: EndDate = None,
    ):
        if kind not in list_reports():
            raise HTTPException(
                status_code=404, detail=f"Unknown report '{kind}'"
            )
        jobs = _jobs(start_date, end_date)
        if kind == "jobs":
            jobs = sort_jobs_newest_first(filter_jobs(jobs, user, printer))
        context = ReportContext(
            jobs=jobs,
            cost_config=costs.get(),
            generated_at=datetime.now(),
            start_date=start_date,
            end_date=end_date,
        )
        body = BOM + render_report(kind, context)
        filename = export_filename(kind, context.generated_at.date())
        return Response(
            content=body,
            media_type="text/csv; charset=utf-8",
            headers={
                "Content-Disposition": f'attachment; filename="{filename}"'
            },
        )

    return app
