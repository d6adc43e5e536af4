"""Tests for GenerationStats class."""

import time

from imgvariants.generation_stats import GenerationStats
from imgvariants.variant_spec import VariantSpec


def _spec(width, size):
    return VariantSpec(
        format='webp', width=width, height=width, filename=f"x-{width}.webp",
        output_path=f"img/x-{width}.webp", url=f"/img/x-{width}.webp",
        mime_type='image/webp', srcset_entry=f"/img/x-{width}.webp {width}w", size=size,
    )


class TestGenerationStats:
    """Tests for GenerationStats class."""

    def test_elapsed_seconds(self):
        """Test elapsed time calculation."""
        stats = GenerationStats()
        stats.start_time = time.time() - 10

        assert stats.elapsed_seconds >= 10
        assert stats.elapsed_seconds < 12

    def test_rate_per_minute(self):
        """Test rate per minute."""
        stats = GenerationStats()
        stats.start_time = time.time() - 60
        stats.processed = 100

        rate = stats.rate_per_minute

        assert rate >= 90
        assert rate <= 110

    def test_record_success(self):
        """Test a completed plan adds its files and bytes."""
        stats = GenerationStats(total_to_process=2)
        stats.record_success({'webp': [_spec(400, 1000), _spec(800, 3000)], 'svg': []})

        assert stats.processed == 1
        assert stats.variants_written == 2
        assert stats.bytes_generated == 4000
        assert stats.remaining_count == 1

    def test_record_failure(self):
        """Test failures are counted with details."""
        stats = GenerationStats(total_to_process=1)
        stats.record_failure('bad.jpg', ValueError('cannot decode'))

        assert stats.errors == 1
        assert stats.error_details == ['bad.jpg: cannot decode']
        assert stats.completed_count == 1
        assert stats.remaining_count == 0
