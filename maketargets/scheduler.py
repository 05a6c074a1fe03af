"""Job scheduler -- enumerate render jobs and drive them through a worker pool.

A run walks a fixed state machine::

    IDLE -> ENUMERATING -> DISPATCHING -> DRAINING -> DONE

Enumerating
    Build the ordered job list: size class -> density -> pattern.  An
    optional name filter restricts the run to one size class.

Dispatching
    Push jobs onto a bounded queue (``maxsize=1``).  A fixed pool of worker
    threads pulls jobs; the producer blocks while the queue is full, which
    is the only backpressure in the system.

Draining
    One sentinel per worker closes the queue; the scheduler joins every
    worker before returning.

Each worker runs a job end to end: synthesis -> color conversion ->
persist -> optional post-process -> persist.  Workers share only the
read-only transfer LUTs.  A job whose pattern yields no image is skipped
with a warning.  Any other failure (notably ``PersistenceError``) aborts
the run: the producer stops enqueuing, remaining jobs are drained without
rendering, and the error is re-raised from ``run()``.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Callable

import numpy as np

from maketargets.patterns.registry import PATTERNS, Pattern
from maketargets.postprocess import RenderedImage, post_process
from maketargets.utils import fs, hashing
from maketargets.utils.color import TransferLUTs, convert
from maketargets.utils.geometry import Size
from maketargets.utils.logging_config import get_context, push_context
from maketargets.utils.profiler import timer
from maketargets.utils.validators import RenderConfig

logger = logging.getLogger(__name__)

SaveFn = Callable[[np.ndarray, Path], Path]

MANIFEST_NAME = "manifest.yaml"


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


def make_name(size_class: str, pattern: str, density: int, suffix: str = "") -> str:
    """Output stem: ``{sizeClass}_{pattern}_{density:03d}{suffix}``."""
    return f"{size_class}_{pattern}_{density:03d}{suffix}"


@dataclass(frozen=True)
class RenderJob:
    """One unit of work; immutable and independent of every other job."""

    size_class: str
    size: Size
    pattern: Pattern
    density: int

    @property
    def stem(self) -> str:
        return make_name(self.size_class, self.pattern.name, self.density)


def resolve_patterns(names: tuple[str, ...] | None) -> list[Pattern]:
    """Registry entries for ``names`` (all patterns when None).

    Raises
    ------
    ValueError
        If a name is not registered
    """
    if names is None:
        return list(PATTERNS.values())
    unknown = [n for n in names if n not in PATTERNS]
    if unknown:
        raise ValueError(f"Unknown pattern(s): {', '.join(unknown)}")
    return [PATTERNS[n] for n in names]


def enumerate_jobs(config: RenderConfig, only: str | None = None) -> list[RenderJob]:
    """Cartesian product of size classes x densities x enabled patterns.

    Parameters
    ----------
    config : RenderConfig
        Validated configuration (densities are already known positive)
    only : str | None
        Restrict to the size class with this name

    Raises
    ------
    ValueError
        If ``only`` names no configured size class, or a pattern is unknown
    """
    size_classes = list(config.size_classes)
    if only is not None:
        size_classes = [sc for sc in size_classes if sc.name == only]
        if not size_classes:
            known = ", ".join(sc.name for sc in config.size_classes)
            raise ValueError(f"Unknown size class {only!r} (known: {known})")

    patterns = resolve_patterns(config.patterns)
    return [
        RenderJob(size_class=sc.name, size=sc.size, pattern=pattern, density=density)
        for sc in size_classes
        for density in config.densities
        for pattern in patterns
    ]


def render_job(job: RenderJob, luts: TransferLUTs) -> RenderedImage | None:
    """Synthesize and sRGB-encode one job; None for a degenerate result."""
    result = job.pattern.render(job.size, job.density, luts)
    if result is None:
        return None
    return RenderedImage(
        stem=job.stem,
        pixels=convert(result.pixels, luts.srgb_encode),
        source=result.pixels,
        needs_post_process=result.needs_post_process,
    )


def run_job(
    job: RenderJob,
    luts: TransferLUTs,
    output_dir: Path,
    mode: str = "clamp",
    save: SaveFn = fs.atomic_save_image,
) -> list[Path]:
    """Execute one job end to end and return the paths written.

    An empty list means the pattern produced no image for this size and
    density and nothing was written.
    """
    with timer(job.stem):
        image = render_job(job, luts)
        if image is None:
            logger.warning(
                "%s produced no image at %dx%d density %d; skipping",
                job.pattern.name, job.size.width, job.size.height, job.density,
            )
            return []

        written = [save(image.pixels, output_dir / image.stem)]
        logger.info("Wrote %s", written[-1].name)

        variant = post_process(image, mode)
        if variant is not None:
            stem, pixels = variant
            written.append(save(pixels, output_dir / stem))
            logger.info("Wrote %s", written[-1].name)
    return written


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------


class SchedulerState(Enum):
    """Run lifecycle."""

    IDLE = auto()
    ENUMERATING = auto()
    DISPATCHING = auto()
    DRAINING = auto()
    DONE = auto()


@dataclass
class RunSummary:
    """Outcome of one run."""

    jobs: int = 0
    written: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    elapsed_s: float = 0.0


_SENTINEL = None


def available_cpus() -> int:
    """CPUs this process may run on (affinity-aware where the OS reports it)."""
    if hasattr(os, "sched_getaffinity"):
        return len(os.sched_getaffinity(0)) or 1
    return os.cpu_count() or 1


class RenderScheduler:
    """Fixed-size worker pool over a bounded job queue.

    Parameters
    ----------
    config : RenderConfig
        Validated configuration.
    luts : TransferLUTs
        Transfer tables, built once before the run and shared read-only.
    save : SaveFn
        Persistence collaborator ``save(pixels, path_stem) -> path``.
    """

    def __init__(
        self,
        config: RenderConfig,
        luts: TransferLUTs,
        save: SaveFn = fs.atomic_save_image,
    ) -> None:
        self._cfg = config
        self._luts = luts
        self._save = save
        self._workers = config.workers or available_cpus()

        self._state = SchedulerState.IDLE
        self._queue: queue.Queue[RenderJob | None] = queue.Queue(maxsize=1)
        self._abort = threading.Event()
        self._lock = threading.Lock()
        self._errors: list[BaseException] = []
        self._summary = RunSummary()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def workers(self) -> int:
        return self._workers

    def _set_state(self, state: SchedulerState) -> None:
        logger.debug("Scheduler %s -> %s", self._state.name, state.name)
        self._state = state

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, only: str | None = None) -> RunSummary:
        """Render every job and block until all workers have returned.

        Parameters
        ----------
        only : str | None
            Restrict the run to one size class.

        Returns
        -------
        RunSummary
            Files written and jobs skipped.

        Raises
        ------
        RuntimeError
            If the scheduler has already run.
        fs.PersistenceError
            If an output could not be written (the run is aborted).
        """
        if self._state is not SchedulerState.IDLE:
            raise RuntimeError(f"Scheduler already used (state {self._state.name})")
        start = time.perf_counter()

        self._set_state(SchedulerState.ENUMERATING)
        jobs = enumerate_jobs(self._cfg, only)
        self._summary.jobs = len(jobs)
        fs.ensure_dir(self._cfg.output_dir)
        logger.info(
            "Rendering %d jobs with %d workers into %s",
            len(jobs), self._workers, self._cfg.output_dir,
        )

        self._set_state(SchedulerState.DISPATCHING)
        context = get_context()
        threads = [
            threading.Thread(
                target=self._worker, args=(i, context), name=f"render-{i}", daemon=True,
            )
            for i in range(self._workers)
        ]
        for t in threads:
            t.start()

        for job in jobs:
            if self._abort.is_set():
                break
            self._queue.put(job)

        self._set_state(SchedulerState.DRAINING)
        for _ in threads:
            self._queue.put(_SENTINEL)
        for t in threads:
            t.join()

        self._summary.elapsed_s = time.perf_counter() - start
        self._set_state(SchedulerState.DONE)

        if self._errors:
            raise self._errors[0]

        if self._cfg.manifest:
            self._write_manifest()

        logger.info(
            "Done: %d files written, %d jobs skipped in %.1f s",
            len(self._summary.written), len(self._summary.skipped), self._summary.elapsed_s,
        )
        return self._summary

    def _worker(self, index: int, context: dict) -> None:
        """Pull jobs until the sentinel arrives."""
        push_context(**context, worker=index)
        while True:
            job = self._queue.get()
            if job is _SENTINEL:
                return
            if self._abort.is_set():
                continue
            try:
                written = run_job(
                    job, self._luts, self._cfg.output_dir,
                    self._cfg.postprocess_mode, self._save,
                )
            except Exception as exc:  # noqa: BLE001
                logger.critical("Aborting run: %s failed: %s", job.stem, exc)
                with self._lock:
                    self._errors.append(exc)
                self._abort.set()
                continue
            with self._lock:
                if written:
                    self._summary.written.extend(written)
                else:
                    self._summary.skipped.append(job.stem)

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    def _write_manifest(self) -> Path:
        """Record written files (with SHA-256) and skipped jobs as YAML."""
        path = Path(self._cfg.output_dir) / MANIFEST_NAME
        manifest = {
            "postprocess_mode": self._cfg.postprocess_mode,
            "size_classes": [sc.name for sc in self._cfg.size_classes],
            "densities": list(self._cfg.densities),
            "jobs": self._summary.jobs,
            "files": [
                {"name": p.name, "sha256": hashing.sha256_file(p)}
                for p in sorted(self._summary.written)
            ],
            "skipped": sorted(self._summary.skipped),
        }
        fs.atomic_yaml_dump(manifest, path)
        logger.info("Wrote %s", path.name)
        return path
