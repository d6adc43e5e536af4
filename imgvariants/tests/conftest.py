"""
Pytest fixtures for imgvariants tests.
"""

import io

import pytest


SVG_DOCUMENT = (
    b'<?xml version="1.0" encoding="UTF-8"?>\n'
    b'<svg xmlns="http://www.w3.org/2000/svg" width="100" height="50" viewBox="0 0 100 50">'
    b'<rect width="100" height="50" fill="#336699"/></svg>'
)


@pytest.fixture
def out_dir(tmp_path):
    """Fixture providing an output directory path (not yet created)."""
    return str(tmp_path / "out")


@pytest.fixture
def options(out_dir):
    """Fixture providing options that write into the temporary output directory."""
    from imgvariants.options import resolve_options

    return resolve_options(output_dir=out_dir, url_path='/img/')


@pytest.fixture
def sample_jpeg_bytes():
    """Fixture providing 800x600 JPEG image bytes."""
    from PIL import Image

    img = Image.new('RGB', (800, 600), color='red')
    buffer = io.BytesIO()
    img.save(buffer, format='JPEG')
    return buffer.getvalue()


@pytest.fixture
def sample_jpeg_file(tmp_path, sample_jpeg_bytes):
    """Fixture providing an 800x600 JPEG file on disk."""
    path = tmp_path / "photo.jpg"
    path.write_bytes(sample_jpeg_bytes)
    return str(path)


@pytest.fixture
def sample_png_bytes():
    """Fixture providing 200x100 PNG bytes with transparency."""
    from PIL import Image

    img = Image.new('RGBA', (200, 100), color=(255, 0, 0, 128))
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def sample_svg_bytes():
    """Fixture providing a 100x50 SVG document."""
    return SVG_DOCUMENT


@pytest.fixture
def sample_svg_file(tmp_path):
    """Fixture providing a 100x50 SVG file on disk."""
    path = tmp_path / "logo.svg"
    path.write_bytes(SVG_DOCUMENT)
    return str(path)


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')
