import logging
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from process import (
    DecodeError,
    EncodeError,
    ResizeError,
    output_path,
    process_file,
)
from scan import Found, find_images

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Result:
    found: Found
    output: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None


@dataclass
class Summary:
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    failures: List[Result] = field(default_factory=list)
    cancelled: bool = False

    def add(self, result):
        if result.ok:
            self.succeeded += 1
        else:
            self.failed += 1
            self.failures.append(result)

    def exit_code(self, strict=False):
        if self.cancelled:
            return 130
        if self.failed and (strict or self.failed == self.total):
            return 1
        return 0


def plan(job, files):
    """Yield each file with its output path in the mirrored directory tree."""
    taken = set()

    for found in files:
        output_dir = job.output / found.relative.parent
        yield found, output_path(found, output_dir, job.format, taken)


def work(found, output, job):
    try:
        process_file(found.path, output, job)
    except (DecodeError, ResizeError, EncodeError) as e:
        return Result(found, error=str(e))
    except OSError as e:
        return Result(found, error=f'Could not process "{found.path}": {e}')

    return Result(found, output)


def run(job, advance=None, stop=None, files=None):
    """Process every image under ``job.source``, ``advance`` runs on this thread."""
    if files is None:
        files = find_images(job.source, exclude=job.output)

    job.output.mkdir(parents=True, exist_ok=True)
    summary = Summary(total=len(files))

    if not files:
        logger.info(f'No images found in "{job.source}"')
        return summary

    logger.debug(f"Processing {len(files)} images with {job.workers} workers")
    queue = plan(job, files)
    pending = set()

    def collect(done):
        for future in done:
            result = future.result()

            if not result.ok:
                logger.error(result.error)

            summary.add(result)
            advance and advance(result)

    with ThreadPoolExecutor(max_workers=job.workers) as executor:
        try:
            for found, output in queue:
                if stop and stop.is_set():
                    summary.cancelled = True
                    break

                pending.add(executor.submit(work, found, output, job))

                if len(pending) >= job.workers:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    collect(done)
        except KeyboardInterrupt:
            summary.cancelled = True
            logger.warning("Interrupted, waiting for running files to finish")

        done, pending = wait(pending)
        collect(done)

    if summary.cancelled:
        logger.warning(
            f"Stopped after {summary.succeeded + summary.failed} of {summary.total} files"
        )

    return summary
