"""
BatchGenerator - Generates variants for many images through one queue.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Union

from .generation_progress import GenerationProgress
from .generation_stats import GenerationStats
from .image import generate
from .job_queue import JobQueue
from .options import ImageOptions, resolve_options
from .variant_spec import VariantPlan


@dataclass
class BatchResult:
    """
    Outcome of a batch.

    Attributes:
        plans: Written plans keyed by source
        failures: Exceptions keyed by source, for images that failed
        stats: Counters for the batch
    """
    plans: Dict[str, VariantPlan] = field(default_factory=dict)
    failures: Dict[str, BaseException] = field(default_factory=dict)
    stats: GenerationStats = field(default_factory=GenerationStats)


class BatchGenerator:
    """
    Submits every source to a JobQueue at once and collects the results.

    Each image is an independent job: one failing image is recorded in the
    result and does not stop the others.
    """

    def __init__(
        self,
        options: Union[ImageOptions, dict, None] = None,
        queue: Optional[JobQueue] = None,
        progress: Optional[GenerationProgress] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize batch generator.

        Args:
            options: Options shared by every image
            queue: Queue to run on; a new queue sized by options.concurrency if omitted
            progress: Optional progress tracker
            logger: Optional logger instance
        """
        self.options = resolve_options(options)
        self.queue = queue or JobQueue(self.options.concurrency, logger=logger)
        self.progress = progress
        self.logger = logger or logging.getLogger(__name__)

    async def run(self, sources: Iterable[str], **generate_kwargs) -> BatchResult:
        """
        Generate variants for every source.

        Args:
            sources: Local paths or URLs
            **generate_kwargs: Passed through to generate() (codec, fetcher)

        Returns:
            BatchResult with plans, failures and stats
        """
        sources = list(dict.fromkeys(sources))
        result = BatchResult(stats=GenerationStats(total_to_process=len(sources)))

        self.logger.info(
            f"Starting generation: {len(sources)} images "
            f"(concurrency {self.queue.concurrency})"
        )

        async def run_one(src: str) -> None:
            try:
                plan = await generate(
                    src, self.options, queue=self.queue, logger=self.logger, **generate_kwargs
                )
            except Exception as e:
                self.logger.error(f"Error processing {src}: {e}")
                result.failures[src] = e
                result.stats.record_failure(src, e)
                if self.progress:
                    self.progress.on_image_processed(src, success=False, error=str(e))
            else:
                result.plans[src] = plan
                result.stats.record_success(plan)
                if self.progress:
                    self.progress.on_image_processed(src, success=True, plan=plan)

            if self.progress:
                self.progress.on_progress_update(result.stats)

        await asyncio.gather(*(run_one(src) for src in sources))

        self.logger.info(
            f"Generation complete: {result.stats.processed} images, "
            f"{result.stats.variants_written} files, {result.stats.errors} errors "
            f"({result.stats.elapsed_seconds:.1f}s)"
        )
        return result
