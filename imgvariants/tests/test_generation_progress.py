"""Tests for GenerationProgress class."""

from imgvariants.generation_progress import GenerationProgress
from imgvariants.generation_stats import GenerationStats
from imgvariants.options import resolve_options
from imgvariants.planner import plan_variants
from imgvariants.variant_spec import SourceMetadata


class TestGenerationProgress:
    """Tests for GenerationProgress class."""

    def test_init_defaults(self, logger):
        """Test default initialization."""
        progress = GenerationProgress(logger=logger)

        assert progress.show_files is False
        assert progress.log_interval == 100

    def test_on_image_processed_success_show_files(self, logger, capsys):
        """Test show_files output lists each written variant."""
        progress = GenerationProgress(show_files=True, logger=logger)
        plan = plan_variants(
            'photo.jpg', SourceMetadata(800, 600, 'jpeg'), resolve_options(widths=[None, 400], formats=['webp'])
        )

        progress.on_image_processed('photo.jpg', success=True, plan=plan)

        captured = capsys.readouterr()
        assert '[OK] photo.jpg' in captured.out
        assert '400x300' in captured.out
        assert '800x600' in captured.out

    def test_on_image_processed_error_show_files(self, logger, capsys):
        """Test show_files output for failed processing."""
        progress = GenerationProgress(show_files=True, logger=logger)

        progress.on_image_processed('bad.jpg', success=False, error='test error')

        captured = capsys.readouterr()
        assert 'ERROR' in captured.out
        assert 'test error' in captured.out

    def test_quiet_without_show_files(self, logger, capsys):
        """Test nothing is printed per image when show_files is off."""
        progress = GenerationProgress(logger=logger)

        progress.on_image_processed('photo.jpg', success=True, plan={})

        assert capsys.readouterr().out == ''

    def test_callable_interface(self, logger):
        """Test using progress as callback."""
        progress = GenerationProgress(logger=logger)
        stats = GenerationStats(total_to_process=100)
        stats.processed = 100

        progress(stats)

        assert progress.last_logged == 100
