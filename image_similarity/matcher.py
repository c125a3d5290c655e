"""Matcher: pairwise pixel comparison over every unordered pair of images.

Images are compared only when their shapes (rows, cols and channels) are
equal; other pairs are skipped and tallied per anchor image. The similarity
of a comparable pair is the fraction of array elements whose absolute
difference is within the pixel precision.
"""
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

import numpy as np

from .config import Configuration
from .logging import get_logger
from .report import LABEL_IDENTICAL, LABEL_SIMILAR, ReportWriter
from .store import ImageSource

logger = get_logger(__name__)


@dataclass(frozen=True)
class MatchRecord:
    similarity: float
    path_a: str
    path_b: str
    label: str


@dataclass
class ScanSummary:
    images: int = 0
    pairs: int = 0
    compared: int = 0
    mismatched: int = 0
    matches: int = 0


def _wide(pixels: np.ndarray) -> np.ndarray:
    if pixels.dtype == np.bool_ or np.issubdtype(pixels.dtype, np.integer):
        return pixels.astype(np.int64)
    return pixels.astype(np.float64)


def pixel_similarity(img1: np.ndarray, img2: np.ndarray, precision: float = 0, exact: bool = False) -> float:
    """Fraction of elements of two equally shaped arrays within ``precision``.

    With ``exact`` set the result is 1.0 for identical arrays and 0.0 for
    anything else, without computing the difference.
    """
    if img1.shape != img2.shape:
        raise ValueError(f"shape mismatch: {img1.shape} vs {img2.shape}")
    if exact:
        return 1.0 if np.array_equal(img1, img2) else 0.0
    diff = np.abs(_wide(img1) - _wide(img2))
    total = diff.size
    if total == 0:
        return 0.0
    within = int(np.count_nonzero(diff <= precision))
    return within / total


def classify(similarity: float, threshold: float) -> Optional[str]:
    if similarity == 1:
        return LABEL_IDENTICAL
    if similarity >= threshold:
        return LABEL_SIMILAR
    return None


def iter_matches(
    source: ImageSource,
    config: Configuration,
    console: Callable[[str], None] = print,
    summary: Optional[ScanSummary] = None,
) -> Iterator[MatchRecord]:
    """Yield a MatchRecord for every pair at or above the threshold.

    Anchors run over ``[0, n-1)`` and partners over ``(i, n)``, giving
    ``n(n-1)/2`` candidate pairs. Progress and mismatch tallies go to
    ``console``; ``summary`` is updated in place when given.
    """
    if summary is None:
        summary = ScanSummary()
    n = len(source)
    summary.images = n
    exact = config.exact_fast_path
    if exact:
        logger.debug("Using exact-equality fast path")

    for i in range(n - 1):
        path1 = source.path(i)
        img1 = source.load(i)
        first_skip = True
        mismatch_count = 0

        console(f"[{i + 1}/{n}] COMPARING IMAGES: {path1}")

        for j in range(i + 1, n):
            summary.pairs += 1
            path2 = source.path(j)
            img2 = source.load(j)

            if img1.shape != img2.shape:
                if first_skip:
                    console("DIMENSION MISMATCH FOUND")
                    first_skip = False
                mismatch_count += 1
                continue

            similarity = pixel_similarity(img1, img2, config.pixel_precision, exact=exact)
            summary.compared += 1
            label = classify(similarity, config.similarity_threshold)
            if label is None:
                continue
            summary.matches += 1
            yield MatchRecord(similarity=similarity, path_a=path1, path_b=path2, label=label)

        if not first_skip:
            console(f"DIMENSION MISMATCH: {mismatch_count} IMAGES")
        summary.mismatched += mismatch_count


def scan_pairs(source: ImageSource, config: Configuration, writer: ReportWriter) -> ScanSummary:
    """Run the full pairwise scan, writing each match to ``writer``."""
    summary = ScanSummary()
    started = time.perf_counter()
    for match in iter_matches(source, config, console=writer.console, summary=summary):
        writer.write_match(match.label, match.similarity, match.path_a, match.path_b)
    logger.debug(
        "Scanned %d pair(s) in %.2fs: %d compared, %d mismatched, %d matched",
        summary.pairs,
        time.perf_counter() - started,
        summary.compared,
        summary.mismatched,
        summary.matches,
    )
    return summary
