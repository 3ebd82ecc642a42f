"""Loading statement bytes from disk or over HTTP and decoding them."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import requests
from requests.exceptions import RequestException

from ofx_viewer.decoder import decode_bytes
from ofx_viewer.diagnostics import Diagnostics
from ofx_viewer.errors import OfxIOError
from ofx_viewer.models import ProcessingJob, ProcessingResult

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from ofx_viewer.config import ViewerSettings

LOGGER = logging.getLogger(__name__)


def ca_bundle(settings: ViewerSettings) -> bool | str:
    """Return the ``verify`` argument for requests: the configured CA file, or the system store."""

    ca_path = settings.ca_cert_path
    if ca_path is None:
        return True
    if not ca_path.is_file():
        LOGGER.warning('Ignoring CA bundle %s: not a file, using the system certificate store.', ca_path)
        return True
    return str(ca_path)


def fetch_url(url: str, settings: ViewerSettings, *, session: requests.Session | None = None) -> bytes:
    """Download ``url`` and return the response body."""

    client = session or requests.Session()
    try:
        response = client.get(
            url,
            headers={'Accept': 'application/x-ofx, */*'},
            timeout=settings.request_timeout,
            verify=ca_bundle(settings),
        )
        response.raise_for_status()
    except RequestException as exc:
        raise OfxIOError(url, str(exc)) from exc
    LOGGER.debug('Fetched %s: %d bytes', url, len(response.content))
    return response.content


def read_source(
    job: ProcessingJob,
    settings: ViewerSettings,
    *,
    session: requests.Session | None = None,
) -> bytes:
    """Return the raw bytes named by ``job``."""

    if job.is_remote:
        return fetch_url(job.source, settings, session=session)
    path = Path(job.source)
    try:
        with path.open('rb') as handle:
            return handle.read()
    except OSError as exc:
        raise OfxIOError(job.source, exc.strerror or str(exc)) from exc


def process_job(
    job: ProcessingJob,
    settings: ViewerSettings,
    *,
    session: requests.Session | None = None,
) -> ProcessingResult:
    """Load and decode ``job``, collecting diagnostics on the result."""

    diagnostics = Diagnostics()
    raw = read_source(job, settings, session=session)
    document = decode_bytes(
        raw,
        settings.policy,
        diagnostics=diagnostics,
        fallback_encoding=settings.fallback_encoding,
    )
    return ProcessingResult(job=job, document=document, diagnostics=diagnostics)
