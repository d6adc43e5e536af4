"""
GenerationStats - Statistics for generated images.
"""

import time
from dataclasses import dataclass, field
from typing import List

from .variant_spec import VariantPlan


@dataclass
class GenerationStats:
    """
    Statistics for a set of image jobs.

    Attributes:
        total_to_process: Jobs submitted
        processed: Jobs that produced every variant
        errors: Jobs that failed
        variants_written: Total variant files written
        bytes_generated: Total bytes of variant files written
        start_time: Start timestamp
        error_details: List of error messages
    """
    total_to_process: int = 0
    processed: int = 0
    errors: int = 0
    variants_written: int = 0
    bytes_generated: int = 0
    start_time: float = field(default_factory=time.time)
    error_details: List[str] = field(default_factory=list)

    def record_success(self, plan: VariantPlan) -> None:
        """Count a completed job and the files it wrote."""
        self.processed += 1
        for specs in plan.values():
            self.variants_written += len(specs)
            self.bytes_generated += sum(spec.size or 0 for spec in specs)

    def record_failure(self, src: str, error: BaseException) -> None:
        """Count a failed job."""
        self.errors += 1
        self.error_details.append(f"{src}: {error}")

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time

    @property
    def rate_per_second(self) -> float:
        """Processing rate in images per second."""
        if self.elapsed_seconds > 0:
            return self.processed / self.elapsed_seconds
        return 0.0

    @property
    def rate_per_minute(self) -> float:
        """Processing rate in images per minute."""
        return self.rate_per_second * 60

    @property
    def completed_count(self) -> int:
        """Total completed (processed + errors)."""
        return self.processed + self.errors

    @property
    def remaining_count(self) -> int:
        """Remaining to process."""
        return self.total_to_process - self.completed_count
