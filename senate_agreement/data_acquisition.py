"""
Data Acquisition Module for the Senate Agreement Dashboard.

Loads the member metadata and the voting records, in that order, into the
shared ``Congress`` state and seeds the derived agreement data.
"""

import asyncio
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional
import requests
from tqdm import tqdm

from .state import Congress

logger = logging.getLogger(__name__)


class LoadError(Exception):
    """Base class for failures of the load sequence."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{message}: {source}")
        self.source = source


class FetchFailure(LoadError):
    """Resource could not be retrieved (network error, HTTP status, missing file)."""


class ParseFailure(LoadError):
    """Resource was retrieved but is not valid JSON."""


class LoaderStateError(RuntimeError):
    """Raised when a loader that already finished is started again."""


class LoaderState(Enum):
    NOT_STARTED = "not_started"
    LOADING_METADATA = "loading_metadata"
    LOADING_RECORDS = "loading_records"
    READY = "ready"
    FAILED = "failed"


ReadyCallback = Callable[[Congress], None]


class DataLoader:
    """
    Two-stage loader for the Senate 114 datasets.

    The records resource is only fetched after the metadata resource has been
    fetched, parsed and stored. Sources are resolved against ``data_dir``
    unless they are ``http(s)://`` URLs.
    """

    DATASETS = {
        "metadata": "data/Senate114Metadata.json",
        "records": "data/SenateRecord114.json",
    }

    DEFAULT_TIMEOUT = 60

    def __init__(
        self,
        congress: Congress,
        data_dir: str = ".",
        metadata_path: Optional[str] = None,
        records_path: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        show_progress: bool = False,
    ):
        """
        Initialize the data loader.

        Args:
            congress: Shared state to populate.
            data_dir: Base directory for relative resource paths.
            metadata_path: Metadata resource path or URL.
            records_path: Records resource path or URL.
            timeout: HTTP request timeout in seconds.
            show_progress: Show a download progress bar for URL sources.
        """
        self.congress = congress
        self.data_dir = Path(data_dir)
        self.metadata_path = metadata_path or self.DATASETS["metadata"]
        self.records_path = records_path or self.DATASETS["records"]
        self.timeout = timeout
        self.show_progress = show_progress

        self.state = LoaderState.NOT_STARTED
        self._ready_callbacks: List[ReadyCallback] = []

    def add_ready_callback(self, callback: ReadyCallback):
        """Register ``callback(congress)`` to run once loading has completed."""
        self._ready_callbacks.append(callback)

    @staticmethod
    def _is_url(source: str) -> bool:
        return source.startswith(("http://", "https://"))

    def _download(self, url: str) -> bytes:
        """
        Download a resource over HTTP.

        Raises:
            FetchFailure: On network or HTTP errors.
        """
        logger.info(f"Downloading: {url}")

        try:
            response = requests.get(url, stream=True, timeout=self.timeout)
            response.raise_for_status()

            total_size = int(response.headers.get('content-length', 0))
            chunks = []

            with tqdm(total=total_size, unit='B', unit_scale=True,
                      desc=url.rsplit('/', 1)[-1], disable=not self.show_progress) as pbar:
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:
                        chunks.append(chunk)
                        pbar.update(len(chunk))

        except requests.RequestException as e:
            raise FetchFailure(url, f"Failed to download ({e})") from e

        return b"".join(chunks)

    def _read_source(self, source: str) -> Any:
        """
        Retrieve and parse one JSON resource (blocking).

        Raises:
            FetchFailure: If the resource cannot be retrieved.
            ParseFailure: If the content is not valid JSON.
        """
        if self._is_url(source):
            location = source
            raw = self._download(source)
        else:
            path = self.data_dir / source
            location = str(path)
            try:
                raw = path.read_bytes()
            except OSError as e:
                raise FetchFailure(location, f"Failed to read ({e.strerror or e})") from e

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ParseFailure(location, f"Malformed JSON ({e})") from e

    async def _fetch_json(self, source: str) -> Any:
        """Fetch one resource without blocking the event loop."""
        return await asyncio.to_thread(self._read_source, source)

    def _fail(self, stage: str, error: Exception):
        self.state = LoaderState.FAILED
        logger.error(f"Loading halted while {stage}: {error}")

    async def load(self) -> Congress:
        """
        Run the load sequence: metadata, then records, then derived data.

        Returns:
            The populated ``Congress`` state.

        Raises:
            FetchFailure: If a resource cannot be retrieved.
            ParseFailure: If a resource is not valid JSON.
            LoaderStateError: If this loader has already run.
        """
        if self.state is not LoaderState.NOT_STARTED:
            raise LoaderStateError(f"Loader already started (state: {self.state.value})")

        # First load and assign metadata
        self.state = LoaderState.LOADING_METADATA
        try:
            meta_data = await self._fetch_json(self.metadata_path)
        except LoadError as e:
            self._fail("loading metadata", e)
            raise
        self.congress.meta_data = meta_data
        logger.info(f"Loaded metadata from {self.metadata_path}")

        # Now load and assign record data
        self.state = LoaderState.LOADING_RECORDS
        try:
            data = await self._fetch_json(self.records_path)
        except LoadError as e:
            self._fail("loading records", e)
            raise
        self.congress.data = data
        logger.info(f"Loaded records from {self.records_path}")

        try:
            self.congress.clear_members()
            self.congress.get_agreement_percent()
        except Exception as e:
            self._fail("computing agreement", e)
            raise

        self.state = LoaderState.READY
        logger.info("Data ready")

        for callback in self._ready_callbacks:
            callback(self.congress)

        return self.congress


def load_congress(
    data_dir: str = ".",
    metadata_path: Optional[str] = None,
    records_path: Optional[str] = None,
) -> Congress:
    """
    Convenience function to load a fresh ``Congress`` synchronously.

    Args:
        data_dir: Base directory for relative resource paths.
        metadata_path: Metadata resource path or URL.
        records_path: Records resource path or URL.

    Returns:
        The populated ``Congress`` state.
    """
    loader = DataLoader(Congress(), data_dir, metadata_path, records_path)
    return asyncio.run(loader.load())
