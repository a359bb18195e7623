"""SQLAlchemy table definitions for configurations and request logs."""

from __future__ import annotations

import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

__all__ = ["Base", "ApiConfigurationTable", "ApiRequestLogTable"]


class Base(DeclarativeBase):
    """Declarative base; plain Python annotations map to portable column types."""

    type_annotation_map = {
        str: Text,
        int: Integer,
        bool: Boolean,
        datetime.datetime: DateTime,
    }


class ApiConfigurationTable(Base):
    __tablename__ = "api_configurations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    api_endpoint: Mapped[str] = mapped_column(Text, nullable=False)
    request_template: Mapped[str] = mapped_column(Text, nullable=False)
    bearer_token: Mapped[str | None] = mapped_column(Text)
    delay_between_requests_ms: Mapped[int] = mapped_column(Integer, default=5000, nullable=False)
    max_iterations: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    trust_ssl_certificate: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime.datetime | None] = mapped_column(DateTime, onupdate=func.now())


class ApiRequestLogTable(Base):
    __tablename__ = "api_request_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    api_configuration_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("api_configurations.id"), nullable=False, index=True
    )
    request_payload: Mapped[str] = mapped_column(Text, nullable=False)
    response_content: Mapped[str | None] = mapped_column(Text)
    response_time_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    status_code: Mapped[int] = mapped_column(Integer, nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text)
    request_timestamp: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False)
    is_successful: Mapped[bool] = mapped_column(Boolean, nullable=False)
    iteration_number: Mapped[int] = mapped_column(Integer, nullable=False)
