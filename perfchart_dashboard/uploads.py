from __future__ import annotations

import base64
import binascii
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from . import config
from .errors import DecodeError, PerfChartError
from .normalizer import Dataset, load_dataset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    filename: str
    index: int  # position in the original upload
    dataset: Optional[Dataset] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.dataset is not None


def decode_contents(filename: str, contents: str) -> bytes:
    """Bytes of a dcc.Upload payload ("data:<mime>;base64,<data>")."""
    _, sep, payload = contents.partition(",")
    if not sep:
        raise DecodeError(filename, "missing base64 payload")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(filename, f"invalid base64 payload ({exc})") from exc


def decode_upload(filename: str, contents: str) -> Dataset:
    return load_dataset(filename, decode_contents(filename, contents))


def decode_uploads(
    filenames: Sequence[str],
    contents: Sequence[str],
    progress_callback: Optional[Callable[[int, int, str], None]] = None,
    max_workers: int = config.UPLOAD_WORKERS,
) -> List[UploadResult]:
    """
    Decode several uploads in parallel.

    Results come back in completion order. A file that fails only produces
    an UploadResult with `error` set; the other files are not affected.
    Sort on `index` to get the upload order back.
    """
    total = len(filenames)
    results: List[UploadResult] = []
    if total == 0:
        return results

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, total))) as executor:
        futures = {
            executor.submit(decode_upload, name, data): (i, name)
            for i, (name, data) in enumerate(zip(filenames, contents))
        }

        for future in as_completed(futures):
            i, name = futures[future]
            try:
                result = UploadResult(filename=name, index=i, dataset=future.result())
            except PerfChartError as exc:
                logger.warning("Upload failed: %s", exc)
                result = UploadResult(filename=name, index=i, error=str(exc))

            results.append(result)
            if progress_callback:
                progress_callback(len(results), total, name)

    return results
