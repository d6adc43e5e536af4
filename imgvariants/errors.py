"""
Exception types raised by the variant pipeline.
"""


class ImageVariantsError(Exception):
    """Base class for all imgvariants errors."""


class ConfigurationError(ImageVariantsError):
    """Invalid or unsatisfiable options, missing src, or unusable buffer identity."""


class SourceFetchError(ImageVariantsError):
    """A remote source could not be retrieved."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Unable to fetch {url}: {message}")
        self.url = url


class CodecError(ImageVariantsError):
    """Probing, decoding, resizing or encoding failed."""

    def __init__(self, target: str, message: str):
        super().__init__(f"Error processing {target}: {message}")
        self.target = target
