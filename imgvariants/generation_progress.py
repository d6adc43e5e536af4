"""
GenerationProgress - Tracks and displays batch generation progress.
"""

import logging
from typing import Optional

from .generation_stats import GenerationStats
from .variant_spec import VariantPlan


class GenerationProgress:
    """
    Tracks and displays generation progress with optional per-image output.
    """

    def __init__(
        self,
        show_files: bool = False,
        log_interval: int = 100,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize progress tracker.

        Args:
            show_files: If True, print each variant as its image completes
            log_interval: Log summary progress every N images (when not show_files)
            logger: Optional logger instance
        """
        self.show_files = show_files
        self.log_interval = log_interval
        self.logger = logger or logging.getLogger(__name__)
        self.last_logged = 0

    def on_image_processed(
        self,
        src: str,
        success: bool,
        plan: Optional[VariantPlan] = None,
        error: Optional[str] = None
    ) -> None:
        """
        Called when an image job finishes.

        Args:
            src: The source identity
            success: Whether every variant was written
            plan: Written variants (if success)
            error: Error message (if failed)
        """
        if not self.show_files:
            return
        if success:
            print(f"  [OK] {src}")
            for specs in (plan or {}).values():
                for spec in specs:
                    print(f"       -> {spec.format_status()}")
        else:
            print(f"  [ERROR] {src} -> {error or 'failed'}")

    def on_progress_update(self, stats: GenerationStats) -> None:
        """
        Called after each image to report overall progress.

        Args:
            stats: Current generation statistics
        """
        total_done = stats.completed_count

        if not self.show_files and total_done - self.last_logged >= self.log_interval:
            self.last_logged = total_done
            self.logger.info(
                f"Progress: {stats.processed} images, {stats.variants_written} files, "
                f"{stats.errors} errors ({stats.rate_per_minute:.1f}/min, "
                f"{stats.remaining_count} left)"
            )

    def __call__(self, stats: GenerationStats) -> None:
        """Allow use as callback for stats updates."""
        self.on_progress_update(stats)
