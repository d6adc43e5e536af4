"""
SourceResolver - Turns a src argument into an ImageSource.
"""

import asyncio
import logging
from typing import Optional, Union
from urllib.parse import urlsplit

from .errors import ConfigurationError
from .fetcher import RemoteFetcher
from .options import ImageOptions
from .variant_spec import ImageSource


def is_full_url(value: str) -> bool:
    """True for absolute URLs; local paths (including Windows drive paths) are not."""
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def buffer_source(data: Union[bytes, bytearray], options: ImageOptions) -> ImageSource:
    """Wrap buffer input, which must carry an explicit identity."""
    if not options.source_identity:
        raise ConfigurationError("source_identity is required when src is a bytes buffer")
    return ImageSource(data=bytes(data), identity=options.source_identity)


class SourceResolver:
    """
    Resolves local paths, remote URLs and buffers into ImageSource records.
    """

    def __init__(self, fetcher: Optional[RemoteFetcher] = None, logger: Optional[logging.Logger] = None):
        self.fetcher = fetcher
        self.logger = logger or logging.getLogger(__name__)

    def _get_fetcher(self, options: ImageOptions) -> RemoteFetcher:
        if self.fetcher is not None:
            return self.fetcher
        return RemoteFetcher(options.cache_options, logger=self.logger)

    async def resolve(self, src: Union[str, bytes, bytearray], options: ImageOptions) -> ImageSource:
        """
        Resolve a src argument.

        Remote URLs are downloaded (through the fetcher cache) and identified
        by the URL. Local paths pass through unchanged.

        Raises:
            ConfigurationError: for empty src or buffers without identity
            SourceFetchError: if a remote source cannot be fetched
        """
        if not src:
            raise ConfigurationError("src is required (a file path, URL, or bytes buffer)")

        if isinstance(src, (bytes, bytearray)):
            return buffer_source(src, options)

        if is_full_url(src):
            fetcher = self._get_fetcher(options)
            data = await asyncio.to_thread(fetcher.fetch, src)
            return ImageSource(data=data, identity=src)

        return ImageSource(data=src, identity=src)
