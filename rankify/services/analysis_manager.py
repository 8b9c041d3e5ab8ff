"""
In-memory registry of background analysis runs.

Usage
-----
    from rankify.services.analysis_manager import analysis_manager

    status = AnalysisStatus()
    analysis_manager.start(run_id, pipeline.analyze(request, status), status)
    # ... later ...
    current = analysis_manager.get_status(run_id)

Runs are keyed by a fresh run id, so two uploads never collide and are never
merged; each run owns its own ``AnalysisStatus``.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Coroutine, Dict, Optional

from rankify.config import settings
from rankify.services.analysis import AnalysisStage, AnalysisStatus

logger = logging.getLogger(__name__)


class AnalysisManager:
    """Manages background analysis asyncio.Tasks per run id."""

    _tasks: Dict[str, asyncio.Task] = {}
    _status: Dict[str, AnalysisStatus] = {}
    max_finished_runs: int = settings.MAX_FINISHED_ANALYSES

    @classmethod
    def is_running(cls, run_id: str) -> bool:
        task = cls._tasks.get(run_id)
        return task is not None and not task.done()

    @classmethod
    def get_status(cls, run_id: str) -> Optional[AnalysisStatus]:
        return cls._status.get(run_id)

    @classmethod
    def start(
        cls,
        run_id: str,
        coro: Coroutine[Any, Any, Any],
        status: AnalysisStatus,
    ) -> AnalysisStatus:
        """
        Launch *coro* as a background task for *run_id*.

        *status* must be the same object the coroutine reports into, so
        pollers see its fields change in real time.
        """
        cls._status[run_id] = status

        async def _wrapper() -> None:
            try:
                await coro
            except Exception as exc:
                logger.error("Analysis run %s crashed: %s", run_id, exc, exc_info=True)
                status.stage = AnalysisStage.FAILED
                status.error = f"analysis crash: {str(exc)[:200]}"
                status.text = "Error: Analysis failed unexpectedly"
            finally:
                if status.completed_at is None:
                    status.completed_at = time.monotonic()

        task = asyncio.create_task(_wrapper())
        cls._tasks[run_id] = task
        task.add_done_callback(lambda _t: cls._cleanup(run_id))

        logger.info("Analysis run %s started", run_id)
        return status

    @classmethod
    async def wait(cls, run_id: str) -> Optional[AnalysisStatus]:
        """Await a run's task if it is still active, then return its status."""
        task = cls._tasks.get(run_id)
        if task is not None:
            await task
        return cls._status.get(run_id)

    @classmethod
    def _cleanup(cls, run_id: str) -> None:
        """Remove the task reference; the status stays pollable until evicted."""
        cls._tasks.pop(run_id, None)
        cls._evict_finished()

    @classmethod
    def _evict_finished(cls) -> None:
        """Keep at most ``max_finished_runs`` finished statuses, dropping the oldest."""
        finished = [rid for rid in cls._status if rid not in cls._tasks]
        excess = len(finished) - cls.max_finished_runs
        for rid in finished[:max(excess, 0)]:
            cls._status.pop(rid, None)
            logger.debug("Evicted status of finished analysis run %s", rid)


# Module-level singleton instance
analysis_manager = AnalysisManager
