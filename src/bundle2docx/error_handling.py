"""Structured warning collection and logging for a single conversion.

An :class:`ErrorManager` is created per request and handed to each stage.
Warnings are logged with machine-readable ``extra`` fields and also kept as
:class:`WarningRecord` values so callers (and tests) can inspect them without
scraping log output.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Any

from bundle2docx.feature_logger import log_feature_decision

logger = logging.getLogger(__name__)


@dataclass
class ErrorContext:
    """Context attached to every log record emitted for a conversion."""

    source_name: str | None = None
    stage: str | None = None
    reference: str | None = None
    flags: dict[str, Any] = field(default_factory=dict)
    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_name": self.source_name,
            "stage": self.stage,
            "reference": self.reference,
            "flags": self.flags,
            "correlation_id": self.correlation_id,
        }


@dataclass(frozen=True)
class WarningRecord:
    event_code: str
    message: str
    stage: str | None = None
    reference: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


class ErrorManager:
    """Log and collect warnings/errors for one conversion request."""

    def __init__(
        self,
        context: ErrorContext | None = None,
        *,
        _records: list[WarningRecord] | None = None,
    ) -> None:
        self.context = context or ErrorContext()
        self._records: list[WarningRecord] = _records if _records is not None else []

    @property
    def warnings(self) -> list[WarningRecord]:
        return list(self._records)

    def for_stage(self, stage: str) -> ErrorManager:
        """Return a manager for ``stage`` that shares this manager's records."""
        return ErrorManager(replace(self.context, stage=stage), _records=self._records)

    def _build_log_data(
        self,
        event_code: str,
        extra: dict[str, Any] | None = None,
        exception: BaseException | None = None,
    ) -> dict[str, Any]:
        data: dict[str, Any] = {"event_code": event_code}
        data.update(self.context.to_dict())
        if extra:
            data.update(extra)
        if exception is not None:
            data["exception_class"] = type(exception).__name__
            data["exception_message"] = str(exception)
        return data

    def warn(
        self,
        event_code: str,
        message: str,
        *,
        extra: dict[str, Any] | None = None,
        exception: BaseException | None = None,
        reference: str | None = None,
    ) -> WarningRecord:
        ref = reference if reference is not None else self.context.reference
        data = self._build_log_data(event_code, extra, exception)
        if ref is not None:
            data["reference"] = ref
        logger.warning("%s: %s", event_code, message, extra=data)

        details = dict(extra or {})
        if exception is not None:
            details["exception_class"] = type(exception).__name__
            details["exception_message"] = str(exception)
        record = WarningRecord(
            event_code=event_code,
            message=message,
            stage=self.context.stage,
            reference=ref,
            details=details,
        )
        self._records.append(record)
        return record

    def error(
        self,
        event_code: str,
        message: str,
        *,
        extra: dict[str, Any] | None = None,
        exception: BaseException | None = None,
    ) -> None:
        data = self._build_log_data(event_code, extra, exception)
        logger.error("%s: %s", event_code, message, extra=data)

    def decision(
        self,
        event_code: str,
        key: str,
        value: Any,
        *,
        extra: dict[str, Any] | None = None,
    ) -> None:
        log_feature_decision(key, str(value), extra)
        data = self._build_log_data(event_code, extra)
        data["decision_key"] = key
        data["decision_value"] = value
        logger.info("%s: %s=%s", event_code, key, value, extra=data)

    def error_policy(
        self,
        feature: str,
        error_type: str,
        action: str,
        *,
        details: str | None = None,
        event_code: str | None = None,
    ) -> None:
        """Log how a recoverable error was handled.

        Logged at INFO: the warning that triggered the policy is already logged
        and recorded. With ``event_code`` the line also carries the structured
        context fields.
        """
        suffix = f" ({details})" if details else ""
        if event_code is None:
            logger.info("%s error policy: %s -> %s%s", feature, error_type, action, suffix)
            return
        data = self._build_log_data(
            event_code,
            {"feature": feature, "error_type": error_type, "action": action, "details": details},
        )
        logger.info(
            "%s: %s error policy: %s -> %s%s",
            event_code,
            feature,
            error_type,
            action,
            suffix,
            extra=data,
        )


__all__ = ["ErrorContext", "ErrorManager", "WarningRecord"]
