"""
RemoteFetcher - Downloads remote sources with an on-disk response cache.
"""

import hashlib
import json
import logging
import os
import tempfile
import time
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import urllib3
from retrying import retry

from .errors import SourceFetchError
from .options import CacheOptions, parse_duration


def _is_transport_error(exception: Exception) -> bool:
    return isinstance(exception, urllib3.exceptions.HTTPError)


def _write_atomic(path: str, data: bytes) -> None:
    """Write to a temporary file beside path, then move it into place."""
    directory, name = os.path.split(path)
    fd, tmp_path = tempfile.mkstemp(prefix=name + '.', suffix='.part', dir=directory)
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


class RemoteFetcher:
    """
    Fetches remote image bytes, caching responses under a local directory.

    Each cached response is stored as "<key>.buffer" alongside a
    "<key>.json" record holding the URL and fetch time.
    """

    def __init__(
        self,
        cache_options: Optional[CacheOptions] = None,
        http: Optional[urllib3.PoolManager] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize fetcher.

        Args:
            cache_options: Cache duration/location and request options
            http: Optional urllib3 pool manager (one is created if omitted)
            logger: Optional logger instance
        """
        self.cache_options = cache_options or CacheOptions()
        self.http = http or urllib3.PoolManager()
        self.logger = logger or logging.getLogger(__name__)

    def cache_key(self, url: str) -> str:
        """Cache key for a URL, ignoring the query string if configured."""
        if self.cache_options.remove_url_query_params:
            parts = urlsplit(url)
            url = urlunsplit((parts.scheme, parts.netloc, parts.path, '', ''))
        return hashlib.sha1(url.encode('utf-8')).hexdigest()

    def _cache_paths(self, url: str):
        key = self.cache_key(url)
        base = os.path.join(self.cache_options.directory, key)
        return f"{base}.buffer", f"{base}.json"

    def is_fresh(self, url: str) -> bool:
        """True if a cached response exists and has not expired."""
        buffer_path, record_path = self._cache_paths(url)
        if not (os.path.exists(buffer_path) and os.path.exists(record_path)):
            return False

        max_age = parse_duration(self.cache_options.duration)
        if max_age is None:
            return True

        try:
            with open(record_path, 'r') as f:
                record = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Ignoring unreadable cache record {record_path}: {e}")
            return False
        return time.time() - record.get('cached_at', 0) < max_age

    def fetch(self, url: str) -> bytes:
        """
        Return the bytes for a URL, from cache when fresh.

        A stale cached copy is returned, with a warning, when refetching fails.

        Raises:
            SourceFetchError: if the URL cannot be retrieved
        """
        buffer_path, record_path = self._cache_paths(url)

        if self.is_fresh(url):
            self.logger.debug(f"Cache hit: {url}")
            with open(buffer_path, 'rb') as f:
                return f.read()

        try:
            data = self._download(url)
        except (urllib3.exceptions.HTTPError, SourceFetchError) as e:
            if os.path.exists(buffer_path):
                self.logger.warning(f"Refetch failed for {url}, using stale cached copy: {e}")
                with open(buffer_path, 'rb') as f:
                    return f.read()
            if isinstance(e, SourceFetchError):
                raise
            raise SourceFetchError(url, str(e)) from e

        os.makedirs(self.cache_options.directory, exist_ok=True)
        _write_atomic(buffer_path, data)
        _write_atomic(record_path, json.dumps({'url': url, 'cached_at': time.time()}).encode('utf-8'))

        self.logger.debug(f"Fetched {url} ({len(data)} bytes)")
        return data

    @retry(retry_on_exception=_is_transport_error, stop_max_attempt_number=3, wait_exponential_multiplier=1000)
    def _download(self, url: str) -> bytes:
        self.logger.debug(f"Downloading: {url}")
        response = self.http.request('GET', url, **self.cache_options.fetch_options)
        if response.status >= 400:
            raise SourceFetchError(url, f"HTTP {response.status}")
        return response.data
