"""SQLAlchemy-backed configuration store and result sink.

The engine is synchronous; every public coroutine hands its work to a
worker thread with ``asyncio.to_thread`` so the event loop never blocks
on the database.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from typing import Any

from sqlalchemy import create_engine, delete, event, func, select, text, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from replayer.adapters.driven.storage.tables import (
    ApiConfigurationTable,
    ApiRequestLogTable,
    Base,
)
from replayer.ports.storage import RequestConfiguration, RequestResult

__all__ = ["SqlStore", "create_store_engine"]

logger = logging.getLogger(__name__)

RECENT_RESULTS_LIMIT = 10


def create_store_engine(url: str = "sqlite:///replayer.db", *, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    Args:
        url: Database URL (``sqlite:///...``, ``postgresql://...``, etc.).
        echo: Log all SQL when True.

    Returns:
        Configured engine.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo, pool_pre_ping=True)

    # Connections are used from worker threads.
    engine = create_engine(url, echo=echo, connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def _as_utc(moment: datetime.datetime) -> datetime.datetime:
    # SQLite hands back naive datetimes
    if moment.tzinfo is None:
        return moment.replace(tzinfo=datetime.UTC)
    return moment


def _to_configuration(row: ApiConfigurationTable) -> RequestConfiguration:
    return RequestConfiguration(
        id=row.id,
        name=row.name,
        api_endpoint=row.api_endpoint,
        request_template=row.request_template,
        bearer_token=row.bearer_token,
        delay_between_requests_ms=row.delay_between_requests_ms,
        max_iterations=row.max_iterations,
        is_active=bool(row.is_active),
        trust_ssl_certificate=bool(row.trust_ssl_certificate),
    )


def _to_result(row: ApiRequestLogTable) -> RequestResult:
    return RequestResult(
        id=row.id,
        configuration_id=row.api_configuration_id,
        request_payload=row.request_payload,
        iteration_number=row.iteration_number,
        request_timestamp=_as_utc(row.request_timestamp),
        response_time_ms=row.response_time_ms,
        status_code=row.status_code,
        is_successful=bool(row.is_successful),
        response_content=row.response_content,
        error_message=row.error_message,
    )


class SqlStore:
    """Configuration store and append-only result sink over one engine.

    Implements ConfigurationStorePort and ResultSinkPort, plus the
    queries used by the control surface.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    # --- lifecycle ---

    async def create_schema(self) -> None:
        """Create missing tables."""
        await asyncio.to_thread(Base.metadata.create_all, self._engine)

    async def ping(self) -> None:
        """Round-trip a trivial query; raises when the database is unreachable."""
        await asyncio.to_thread(self._ping)

    def _ping(self) -> None:
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        """Dispose the connection pool."""
        await asyncio.to_thread(self._engine.dispose)

    # --- ConfigurationStorePort ---

    async def list_active_configurations(self) -> list[RequestConfiguration]:
        return await asyncio.to_thread(self._list_configurations, True)

    async def count_results(self, configuration_id: int) -> int:
        return await asyncio.to_thread(self._count_results, configuration_id)

    async def set_active(self, configuration_id: int, active: bool) -> None:
        await asyncio.to_thread(self._set_active, configuration_id, active)

    # --- ResultSinkPort ---

    async def append_result(self, result: RequestResult) -> int:
        return await asyncio.to_thread(self._append_result, result)

    # --- control surface queries ---

    async def list_configurations(self) -> list[RequestConfiguration]:
        return await asyncio.to_thread(self._list_configurations, False)

    async def get_configuration(self, configuration_id: int) -> RequestConfiguration | None:
        return await asyncio.to_thread(self._get_configuration, configuration_id)

    async def add_configuration(self, config: RequestConfiguration) -> int:
        """Insert a configuration; its ``id`` is ignored and the new one returned."""
        return await asyncio.to_thread(self._add_configuration, config)

    async def seed_configurations(self, configs: list[RequestConfiguration]) -> int:
        """Insert configurations whose name is not stored yet.

        Returns:
            Number of configurations inserted.
        """
        return await asyncio.to_thread(self._seed_configurations, configs)

    async def deactivate_all(self) -> int:
        """Clear the active flag everywhere; returns the number of rows changed."""
        return await asyncio.to_thread(self._deactivate_all)

    async def clear_results(self, configuration_id: int) -> int:
        """Delete every result row of a configuration; returns the number deleted."""
        return await asyncio.to_thread(self._clear_results, configuration_id)

    async def list_results(self, configuration_id: int) -> list[RequestResult]:
        """Return result rows of a configuration ordered by iteration."""
        return await asyncio.to_thread(self._list_results, configuration_id)

    async def page_results(
        self, configuration_id: int, *, offset: int = 0, limit: int = 50
    ) -> list[RequestResult]:
        """Return one page of result rows of a configuration, newest first."""
        return await asyncio.to_thread(self._page_results, configuration_id, offset, limit)

    async def get_result(self, result_id: int) -> tuple[RequestResult, str] | None:
        """Return a result row with its configuration name, None if unknown."""
        return await asyncio.to_thread(self._get_result, result_id)

    async def statistics(self) -> dict[str, Any]:
        """Aggregate counters over all results."""
        return await asyncio.to_thread(self._statistics)

    async def configuration_statistics(self, configuration_id: int) -> dict[str, Any] | None:
        """Aggregate counters for one configuration, None if it does not exist."""
        return await asyncio.to_thread(self._configuration_statistics, configuration_id)

    # --- sync implementations (worker threads) ---

    def _list_configurations(self, active_only: bool) -> list[RequestConfiguration]:
        stmt = select(ApiConfigurationTable).order_by(ApiConfigurationTable.id)
        if active_only:
            stmt = stmt.where(ApiConfigurationTable.is_active.is_(True))
        with self._sessions() as session:
            return [_to_configuration(row) for row in session.scalars(stmt)]

    def _get_configuration(self, configuration_id: int) -> RequestConfiguration | None:
        with self._sessions() as session:
            row = session.get(ApiConfigurationTable, configuration_id)
            return _to_configuration(row) if row is not None else None

    def _count_results(self, configuration_id: int) -> int:
        stmt = select(func.count(ApiRequestLogTable.id)).where(
            ApiRequestLogTable.api_configuration_id == configuration_id
        )
        with self._sessions() as session:
            return session.scalar(stmt) or 0

    def _set_active(self, configuration_id: int, active: bool) -> None:
        stmt = (
            update(ApiConfigurationTable)
            .where(ApiConfigurationTable.id == configuration_id)
            .values(is_active=active, updated_at=func.now())
        )
        with self._sessions.begin() as session:
            session.execute(stmt)

    def _append_result(self, result: RequestResult) -> int:
        row = ApiRequestLogTable(
            api_configuration_id=result.configuration_id,
            request_payload=result.request_payload,
            response_content=result.response_content,
            response_time_ms=result.response_time_ms,
            status_code=result.status_code,
            error_message=result.error_message,
            request_timestamp=result.request_timestamp,
            is_successful=result.is_successful,
            iteration_number=result.iteration_number,
        )
        with self._sessions.begin() as session:
            session.add(row)
            session.flush()
            return row.id

    def _add_configuration(self, config: RequestConfiguration) -> int:
        with self._sessions.begin() as session:
            row = self._new_configuration_row(config)
            session.add(row)
            session.flush()
            return row.id

    def _seed_configurations(self, configs: list[RequestConfiguration]) -> int:
        inserted = 0
        with self._sessions.begin() as session:
            existing = set(session.scalars(select(ApiConfigurationTable.name)))
            for config in configs:
                if config.name in existing:
                    logger.debug(f"Configuration {config.name} already stored, skipping seed")
                    continue
                session.add(self._new_configuration_row(config))
                existing.add(config.name)
                inserted += 1
        logger.info(f"Seeded {inserted} of {len(configs)} configurations")
        return inserted

    def _deactivate_all(self) -> int:
        stmt = (
            update(ApiConfigurationTable)
            .where(ApiConfigurationTable.is_active.is_(True))
            .values(is_active=False, updated_at=func.now())
        )
        with self._sessions.begin() as session:
            return session.execute(stmt).rowcount

    def _clear_results(self, configuration_id: int) -> int:
        stmt = delete(ApiRequestLogTable).where(
            ApiRequestLogTable.api_configuration_id == configuration_id
        )
        with self._sessions.begin() as session:
            return session.execute(stmt).rowcount

    def _list_results(self, configuration_id: int) -> list[RequestResult]:
        stmt = (
            select(ApiRequestLogTable)
            .where(ApiRequestLogTable.api_configuration_id == configuration_id)
            .order_by(ApiRequestLogTable.iteration_number, ApiRequestLogTable.id)
        )
        with self._sessions() as session:
            return [_to_result(row) for row in session.scalars(stmt)]

    def _page_results(self, configuration_id: int, offset: int, limit: int) -> list[RequestResult]:
        stmt = (
            select(ApiRequestLogTable)
            .where(ApiRequestLogTable.api_configuration_id == configuration_id)
            .order_by(ApiRequestLogTable.request_timestamp.desc(), ApiRequestLogTable.id.desc())
            .offset(offset)
            .limit(limit)
        )
        with self._sessions() as session:
            return [_to_result(row) for row in session.scalars(stmt)]

    def _get_result(self, result_id: int) -> tuple[RequestResult, str] | None:
        stmt = (
            select(ApiRequestLogTable, ApiConfigurationTable.name)
            .join(
                ApiConfigurationTable,
                ApiConfigurationTable.id == ApiRequestLogTable.api_configuration_id,
            )
            .where(ApiRequestLogTable.id == result_id)
        )
        with self._sessions() as session:
            found = session.execute(stmt).first()
        if found is None:
            return None
        row, name = found
        return _to_result(row), name

    def _statistics(self) -> dict[str, Any]:
        log = ApiRequestLogTable
        cfg = ApiConfigurationTable
        with self._sessions() as session:
            total = session.scalar(select(func.count(log.id))) or 0
            successful = session.scalar(
                select(func.count(log.id)).where(log.is_successful.is_(True))
            ) or 0
            average = session.scalar(
                select(func.avg(log.response_time_ms)).where(log.is_successful.is_(True))
            )
            configurations = session.scalar(select(func.count(cfg.id))) or 0
            active = session.scalar(
                select(func.count(cfg.id)).where(cfg.is_active.is_(True))
            ) or 0
            recent = session.execute(
                select(log, cfg.name)
                .join(cfg, cfg.id == log.api_configuration_id)
                .order_by(log.request_timestamp.desc(), log.id.desc())
                .limit(RECENT_RESULTS_LIMIT)
            ).all()

        return {
            "totalRequests": total,
            "successfulRequests": successful,
            "failedRequests": total - successful,
            "averageResponseTime": round(float(average or 0), 2),
            "configurations": configurations,
            "activeConfigurations": active,
            "recentResults": [
                {
                    "id": row.id,
                    "name": name,
                    "responseTimeMs": row.response_time_ms,
                    "isSuccessful": bool(row.is_successful),
                    "statusCode": row.status_code,
                    "requestTimestamp": _as_utc(row.request_timestamp).isoformat(),
                    "iterationNumber": row.iteration_number,
                }
                for row, name in recent
            ],
        }

    def _configuration_statistics(self, configuration_id: int) -> dict[str, Any] | None:
        with self._sessions() as session:
            config = session.get(ApiConfigurationTable, configuration_id)
            if config is None:
                return None
            rows = list(
                session.scalars(
                    select(ApiRequestLogTable).where(
                        ApiRequestLogTable.api_configuration_id == configuration_id
                    )
                )
            )

        total = len(rows)
        successful_times = [r.response_time_ms for r in rows if r.is_successful]
        last = max(rows, key=lambda r: (r.request_timestamp, r.id), default=None)

        return {
            "configurationName": config.name,
            "totalRequests": total,
            "successfulRequests": len(successful_times),
            "failedRequests": total - len(successful_times),
            "successRate": round(len(successful_times) / total * 100, 2) if total else 0,
            "averageResponseTime": (
                round(sum(successful_times) / len(successful_times), 2) if successful_times else 0
            ),
            "minResponseTime": min(successful_times, default=0),
            "maxResponseTime": max(successful_times, default=0),
            "lastRequestTime": _as_utc(last.request_timestamp).isoformat() if last else None,
            "currentIteration": last.iteration_number if last else 0,
        }

    @staticmethod
    def _new_configuration_row(config: RequestConfiguration) -> ApiConfigurationTable:
        return ApiConfigurationTable(
            name=config.name,
            api_endpoint=config.api_endpoint,
            request_template=config.request_template,
            bearer_token=config.bearer_token,
            delay_between_requests_ms=config.delay_between_requests_ms,
            max_iterations=config.max_iterations,
            is_active=config.is_active,
            trust_ssl_certificate=config.trust_ssl_certificate,
        )
