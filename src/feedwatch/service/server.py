"""
feedwatch long-running service (HTTP API + background loops).

Provides:
- Delivery status queries and on-demand missing-file alerts
- Real-time status updates via Server-Sent Events (SSE)
- Cron-scheduled reconciliation passes and daily schedule generation
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from aiohttp import web

from feedwatch.config import Config, MonitorSettings, NotifySettings, StoreSettings, load_config
from feedwatch.connections import SFTPConfig, SFTPConnection
from feedwatch.core.delivery import ChangeEvent
from feedwatch.core.prober import RemoteProber
from feedwatch.core.reconcile import PassSummary, Reconciler
from feedwatch.core.schedule import GenerationSummary, generate_day
from feedwatch.core.state import DeliveryStore
from feedwatch.notify import Mailer
from feedwatch.service.api import EventBus, setup_routes
from feedwatch.service.api.middleware import error_middleware, setup_cors
from feedwatch.service.cron_parser import next_fire_time
from feedwatch.utils.logging import get_logger, setup_logging_from_config

logger = get_logger("feedwatch.service")

RECONCILE_JOB = "reconcile"
DAILY_JOB = "daily"


class MonitorService:
    """Wires the store, prober, reconciler, mailer and event bus together."""

    def __init__(
        self,
        config: Config,
        *,
        project_dir: Path | None = None,
        store: DeliveryStore | None = None,
        connection_factory: Callable[[SFTPConfig], Any] = SFTPConnection,
    ):
        self.config = config
        self.project_dir = project_dir
        self.monitor = MonitorSettings.from_config(config)
        self.remote = SFTPConfig.from_dict(config.section("remote"))
        self.store = store or DeliveryStore.from_settings(StoreSettings.from_config(config, project_dir))
        self.prober = RemoteProber(self.remote, connection_factory=connection_factory)
        self.reconciler = Reconciler(
            self.store,
            self.prober,
            threshold_minutes=self.monitor.delay_threshold_minutes,
            listeners=[self._publish_change],
        )
        self.mailer = Mailer(NotifySettings.from_config(config))
        self.event_bus = EventBus()

        self.last_pass: PassSummary | None = None
        self.last_generation: GenerationSummary | None = None

        self._loop: asyncio.AbstractEventLoop | None = None
        self._pass_lock = asyncio.Lock()
        self._stopping = asyncio.Event()
        self._background_tasks: list[asyncio.Task] = []
        self._scheduler_running = False
        self._next_fire: dict[str, datetime] = {}

    @classmethod
    def from_project(cls, project_dir: Path, env: str | None = None) -> MonitorService:
        config = load_config(project_dir, env=env)
        setup_logging_from_config(config.data, project_dir)
        return cls(config, project_dir=Path(project_dir))

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    async def reconcile_once(self, now: datetime | None = None) -> PassSummary:
        """Run one reconciliation pass in a worker thread; passes never overlap."""
        self._loop = asyncio.get_running_loop()
        async with self._pass_lock:
            summary = await asyncio.to_thread(self.reconciler.run_pass, now)
        self.last_pass = summary
        return summary

    async def generate(self, day: datetime) -> GenerationSummary:
        async with self._pass_lock:
            summary = await asyncio.to_thread(generate_day, self.store, day, self.monitor.feeds)
        self.last_generation = summary
        return summary

    async def startup(self) -> None:
        """Seed today's schedule and bring it up to date."""
        await self.generate(datetime.now(UTC))
        await self.reconcile_once()

    def _publish_change(self, event: ChangeEvent) -> None:
        # Called from the reconcile worker thread
        if self._loop is None or self._loop.is_closed():
            return
        asyncio.run_coroutine_threadsafe(self.event_bus.publish_change(event), self._loop)

    # ------------------------------------------------------------------
    # Background loops
    # ------------------------------------------------------------------

    def start_background_tasks(self) -> None:
        self._stopping.clear()
        self._scheduler_running = True
        self._background_tasks.append(
            asyncio.create_task(
                self._cron_loop(RECONCILE_JOB, self.monitor.reconcile_schedule, lambda _fire_at: self.reconcile_once())
            )
        )
        self._background_tasks.append(
            asyncio.create_task(self._cron_loop(DAILY_JOB, self.monitor.daily_schedule, self.generate))
        )

    async def stop_background_tasks(self) -> None:
        self._stopping.set()
        for t in list(self._background_tasks):
            t.cancel()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()
        self._scheduler_running = False

    async def _cron_loop(self, name: str, schedule: str, job: Callable[[datetime], Awaitable[Any]]) -> None:
        """Sleep until the next cron fire time, run ``job``, repeat."""
        while not self._stopping.is_set():
            now = datetime.now(UTC)
            fire_at = next_fire_time(schedule, now=now)
            self._next_fire[name] = fire_at
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=(fire_at - now).total_seconds())
                return
            except TimeoutError:
                pass

            try:
                await job(fire_at)
            except Exception as e:
                logger.error(f"{name} job failed: {e}")

    def get_scheduler_status(self) -> dict[str, Any]:
        return {
            "running": self._scheduler_running,
            "jobs": {
                RECONCILE_JOB: {
                    "schedule": self.monitor.reconcile_schedule,
                    "next_fire_at": self._iso(self._next_fire.get(RECONCILE_JOB)),
                },
                DAILY_JOB: {
                    "schedule": self.monitor.daily_schedule,
                    "next_fire_at": self._iso(self._next_fire.get(DAILY_JOB)),
                },
            },
        }

    @staticmethod
    def _iso(value: datetime | None) -> str | None:
        return value.isoformat() if value else None

    async def close(self) -> None:
        # Drain SSE subscribers first so their handlers exit cleanly
        await self.event_bus.shutdown()
        await asyncio.sleep(0.1)
        await self.stop_background_tasks()
        self.store.close()


def build_app(
    svc: MonitorService,
    *,
    enable_scheduler: bool = True,
    run_on_startup: bool = True,
    cors_origins: list[str] | None = None,
) -> web.Application:
    """Create the aiohttp application for ``svc``."""
    app = web.Application(middlewares=[error_middleware])

    if cors_origins is None:
        cors_origins = svc.config.get("service.cors_origins") or ["*"]
    setup_cors(app, origins=cors_origins)
    setup_routes(app, svc)

    async def on_startup(app: web.Application) -> None:
        svc._loop = asyncio.get_running_loop()
        if run_on_startup:
            logger.info("Seeding today's deliveries and running initial reconciliation...")
            await svc.startup()
        if enable_scheduler:
            svc.start_background_tasks()

    async def on_shutdown(app: web.Application) -> None:
        # Open SSE streams would otherwise hold up server shutdown
        await svc.event_bus.shutdown()

    async def on_cleanup(app: web.Application) -> None:
        await svc.close()

    app.on_startup.append(on_startup)
    app.on_shutdown.append(on_shutdown)
    app.on_cleanup.append(on_cleanup)
    return app


def run_service(
    *,
    project_dir: Path,
    env: str | None,
    host: str,
    port: int,
    enable_scheduler: bool = True,
    run_on_startup: bool = True,
    cors_origins: list[str] | None = None,
) -> None:
    """
    Run the feedwatch service (blocking).

    Args:
        project_dir: Project directory holding config.yaml
        env: Environment name (dev, staging, prod)
        host: Host to bind to
        port: Port to bind to
        enable_scheduler: Run the reconcile and daily loops
        run_on_startup: Seed today and run one pass before serving
        cors_origins: List of allowed CORS origins
    """
    svc = MonitorService.from_project(project_dir, env=env)
    app = build_app(
        svc,
        enable_scheduler=enable_scheduler,
        run_on_startup=run_on_startup,
        cors_origins=cors_origins,
    )

    logger.info(f"feedwatch service starting on http://{host}:{port}")
    web.run_app(app, host=host, port=port, access_log=None)
