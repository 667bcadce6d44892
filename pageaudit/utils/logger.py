"""
Logger Utility for PageAudit
Provides consistent logging configuration and the pipeline event sink
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logger(verbosity: int = 1,
                 log_file: Optional[str] = None,
                 logger_name: str = "pageaudit",
                 log_dir: Optional[str] = None) -> logging.Logger:
    """Set up logger with console and file output.

    With no `log_file`, a timestamped file is written under `log_dir` when
    one is given; otherwise only the console handler is installed.
    """

    # Create logger
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG if verbosity >= 2 else logging.INFO)

    # Clear existing handlers
    logger.handlers.clear()

    # Console handler with rich formatting
    console = Console(stderr=True)
    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=(verbosity >= 2),
        rich_tracebacks=True,
        markup=False
    )

    if verbosity <= 0:
        console_level = logging.WARNING
    elif verbosity == 1:
        console_level = logging.INFO
    else:
        console_level = logging.DEBUG
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    file_format = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

    if log_file is None and log_dir:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = str(Path(log_dir) / f"pageaudit_{timestamp}.log")

    # File handler if specified
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format))
        logger.addHandler(file_handler)

        logger.debug(f"Detailed logs saved to: {log_path}")

    # Suppress overly verbose third-party loggers unless in debug
    noisy_loggers = [
        "httpx", "httpcore", "asyncio",
    ]
    for name in noisy_loggers:
        logging.getLogger(name).setLevel(logging.WARNING if verbosity < 2 else logging.INFO)

    return logger


class PipelineEventLogger:
    """Structured event sink injected into the analysis engine.

    Emits phase-start, phase-end, unit-failure, cache-hit and score-override
    events. A failing handler is contained here so that emitting an event can
    never change the outcome of a run.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("pageaudit.pipeline")

    def _emit(self, level: int, event: str, **fields: Any) -> None:
        try:
            details = " - ".join(f"{key}: {value}" for key, value in fields.items())
            self.logger.log(level, f"{event} - {details}" if details else event)
        except Exception:
            logging.getLogger(__name__).debug(f"Dropped pipeline event {event}", exc_info=True)

    def phase_start(self, phase: str, target: str) -> None:
        self._emit(logging.DEBUG, "PHASE_START", phase=phase, target=target)

    def phase_end(self, phase: str, target: str, duration_ms: float, **fields: Any) -> None:
        self._emit(logging.INFO, "PHASE_END", phase=phase, target=target,
                   duration_ms=f"{duration_ms:.1f}", **fields)

    def unit_failure(self, phase: str, unit: str, error: str, duration_ms: float) -> None:
        self._emit(logging.WARNING, "UNIT_FAILURE", phase=phase, unit=unit,
                   error=error, duration_ms=f"{duration_ms:.1f}")

    def cache_hit(self, target: str) -> None:
        self._emit(logging.INFO, "CACHE_HIT", target=target)

    def score_override(self, target: str, previous: Any, new: Any, source: str) -> None:
        self._emit(logging.INFO, "SCORE_OVERRIDE", target=target, previous=previous,
                   new=new, source=source)

    def run_aborted(self, target: str, error: str) -> None:
        self._emit(logging.ERROR, "RUN_ABORTED", target=target, error=error)
