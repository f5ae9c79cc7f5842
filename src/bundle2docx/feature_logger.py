"""Decision logging for the conversion pipeline.

Configuration and per-stage decisions go to the ``bundle2docx.feature_logger``
logger at INFO, so ``-v`` shows how a bundle was processed. User-facing
output stays in the CLI.
"""

from __future__ import annotations

import logging
from typing import Any

from bundle2docx.model.options import ConversionOptions

logger = logging.getLogger(__name__)


def log_pipeline_configuration(options: ConversionOptions) -> None:
    """Log the options a conversion runs with, one line per setting."""
    logger.info("Pipeline configuration:")
    for key, value in options.to_dict().items():
        if isinstance(value, list):
            value = ", ".join(value)
        logger.info("  %s: %s", key.replace("_", " ").capitalize(), value)


def log_feature_decision(
    feature: str, decision: str, context: dict[str, Any] | None = None
) -> None:
    """Log one stage decision as ``feature -> decision [key=value ...]``."""
    pairs = " ".join(f"{k}={v}" for k, v in (context or {}).items())
    logger.info("%s -> %s%s", feature, decision, f" [{pairs}]" if pairs else "")


__all__ = [
    "log_feature_decision",
    "log_pipeline_configuration",
]
