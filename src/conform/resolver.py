"""Include resolution for specification documents.

A document's ``include`` list names further documents (URLs or local paths)
whose items are merged after its own. Resolution is recursive: every
included document may include more.

Sibling includes are fetched and resolved concurrently, but the flattened
output order is fixed: the document's own items first, then each include's
fully resolved items in declaration order.
"""

from __future__ import annotations

import concurrent.futures
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from urllib.parse import unquote, urljoin, urlsplit

import httpx

from conform.checker import FilesAndFolders
from conform.document import ConformDocument, load_document
from conform.errors import ConformError, FetchError, IncludeCycleError, SpecificationError
from conform.values import FileFormat

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_WORKERS = 8

# Fetches a URL and returns the document text
Fetcher = Callable[[str], str]


def is_url(reference: str) -> bool:
    """Return True if the reference is an http(s) URL."""
    return urlsplit(reference).scheme in ("http", "https")


@dataclass(frozen=True)
class DocumentSource:
    """Where a specification document lives.

    Attributes:
        location: Absolute URL, or local filesystem path.
        remote: True if ``location`` is a URL.
    """

    location: str
    remote: bool

    @classmethod
    def locate(cls, reference: str, parent: DocumentSource | None = None) -> DocumentSource:
        """Resolve a reference relative to the document that names it.

        Args:
            reference: URL or path, possibly relative.
            parent: The including document, if any.

        Returns:
            The source the reference points to.
        """
        if is_url(reference):
            return cls(reference, remote=True)
        if parent is not None and parent.remote:
            joined = urljoin(parent.location, reference)
            if is_url(joined):
                return cls(joined, remote=True)
        if reference.startswith("file://"):
            return cls(unquote(urlsplit(reference).path), remote=False)

        path = Path(reference).expanduser()
        if not path.is_absolute() and parent is not None and not parent.remote:
            path = Path(parent.location).parent / path
        return cls(str(path.resolve()), remote=False)

    def read(self, fetch: Fetcher) -> str:
        """Read the document text.

        Raises:
            FetchError: If a remote document can't be fetched.
            SpecificationError: If a local document can't be read.
        """
        if self.remote:
            logger.debug("Fetching %s", self.location)
            try:
                return fetch(self.location)
            except ConformError:
                raise
            except Exception as e:
                raise FetchError(self.location, e) from e

        try:
            return Path(self.location).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SpecificationError(self.location, f"couldn't read file: {e}") from e

    def load(self, fetch: Fetcher) -> ConformDocument:
        """Read and parse the document, guessing its format from the suffix."""
        text = self.read(fetch)
        # URL query strings don't count towards the suffix
        suffix_path = urlsplit(self.location).path if self.remote else self.location
        return load_document(text, self.location, FileFormat.for_path(suffix_path))


class HttpFetcher:
    """Fetches documents over HTTP(S) with a shared httpx client.

    Usable as a context manager; the client is closed on exit.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize fetcher.

        Args:
            timeout: Per-request timeout in seconds.
            client: Client to use instead of creating one (e.g. with a mock
                transport).
        """
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def __call__(self, url: str) -> str:
        """Fetch a URL and return its text.

        Raises:
            FetchError: On transport errors or an error status.
        """
        try:
            response = self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchError(url, e) from e
        return response.text

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> HttpFetcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class IncludeResolver:
    """Recursively resolves includes into one flat list of check items."""

    def __init__(self, fetch: Fetcher, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        """Initialize resolver.

        Args:
            fetch: Fetches remote documents.
            max_workers: Maximum concurrent fetches per include list.
        """
        self.fetch = fetch
        self.max_workers = max_workers

    def resolve(
        self,
        document: ConformDocument,
        source: DocumentSource | None = None,
    ) -> list[FilesAndFolders]:
        """Resolve a document's includes.

        Args:
            document: The root document.
            source: Where the root document came from, for relative includes.

        Returns:
            The root items followed by every include's resolved items.

        Raises:
            FetchError: If any include can't be fetched.
            SpecificationError: If any include is invalid.
            IncludeCycleError: If a document includes one of its ancestors.
        """
        chain = (source.location,) if source is not None else ()
        return self._resolve(document, source, chain)

    def _resolve(
        self,
        document: ConformDocument,
        source: DocumentSource | None,
        chain: tuple[str, ...],
    ) -> list[FilesAndFolders]:
        items = list(document.items)
        if not document.includes:
            return items

        children = [DocumentSource.locate(ref, source) for ref in document.includes]
        for child in children:
            if child.location in chain:
                raise IncludeCycleError(chain + (child.location,))

        workers = min(self.max_workers, len(children))
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._resolve_include, child, chain) for child in children
            ]
            try:
                # Gather in declaration order, not completion order
                for future in futures:
                    items.extend(future.result())
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

        return items

    def _resolve_include(
        self,
        source: DocumentSource,
        chain: tuple[str, ...],
    ) -> list[FilesAndFolders]:
        document = source.load(self.fetch)
        return self._resolve(document, source, chain + (source.location,))


def resolve(
    document: ConformDocument,
    source: DocumentSource | None = None,
    fetch: Fetcher | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[FilesAndFolders]:
    """Resolve a document's includes into one flat, ordered item list.

    Args:
        document: The root document.
        source: Where the root document came from, for relative includes.
        fetch: Fetches remote documents. Defaults to an :class:`HttpFetcher`.
        max_workers: Maximum concurrent fetches per include list.
        timeout: Request timeout for the default fetcher.

    Returns:
        The flattened items.
    """
    if not document.includes:
        return list(document.items)

    if fetch is not None:
        items = IncludeResolver(fetch, max_workers).resolve(document, source)
    else:
        with HttpFetcher(timeout=timeout) as http:
            items = IncludeResolver(http, max_workers).resolve(document, source)

    logger.info(
        "Resolved %d include(s) into %d check item(s)", len(document.includes), len(items)
    )
    return items


def load_source(
    reference: str,
    fetch: Fetcher | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> tuple[ConformDocument, DocumentSource]:
    """Load the root specification document from a path or URL.

    Args:
        reference: Local path or http(s) URL.
        fetch: Fetches remote documents. Defaults to an :class:`HttpFetcher`.
        timeout: Request timeout for the default fetcher.

    Returns:
        The parsed document and its source.

    Raises:
        FetchError: If a remote document can't be fetched.
        SpecificationError: If the document can't be read or is invalid.
    """
    source = DocumentSource.locate(reference)
    if not source.remote or fetch is not None:
        return source.load(fetch or _no_fetch), source
    with HttpFetcher(timeout=timeout) as http:
        return source.load(http), source


def _no_fetch(url: str) -> str:
    raise FetchError(url, "no fetcher configured")
