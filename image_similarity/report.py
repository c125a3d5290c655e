"""Reporting utilities: the text report and the console lines that mirror it."""
from pathlib import Path
from typing import Callable, Optional

from .config import Configuration, format_number

LABEL_IDENTICAL = "IDENTICAL"
LABEL_SIMILAR = "SIMILAR"


def header_lines(config: Configuration):
    lines = [f"Pixel precision: {format_number(config.pixel_precision)}"]
    if config.target_size is not None:
        lines.append(f"Resized image dimensions: {config.rows}x{config.cols}")
    lines.append(f"Similarity threshold: {config.similarity_threshold:f}")
    return lines


def summary_lines(config: Configuration, count: int):
    lines = [
        f"COMPARING {count} IMAGES",
        f"SIMILARITY THRESHOLD: {config.similarity_threshold:f}",
        f"PIXEL PRECISION: {format_number(config.pixel_precision)}",
    ]
    if config.target_size is not None:
        lines.append(f"ROW DIMENSION SIZE: {config.rows}")
        lines.append(f"COLUMN DIMENSION SIZE: {config.cols}")
    return lines


def match_line(similarity: float, path_a: str, path_b: str) -> str:
    return f"{format_number(similarity)},{path_a},{path_b}"


def console_match_line(label: str, similarity: float, path_a: str, path_b: str) -> str:
    if label == LABEL_IDENTICAL:
        prefix = "IDENTICAL IMAGES"
    else:
        prefix = "SIMILAR IMAGES  "
    return f"{prefix} ({similarity:f}): {path_a} {path_b}"


class ReportWriter:
    """Owns the report file and the console stream for one run.

    The report is truncated when opened and the header written straight away;
    match lines are appended as they are produced.
    """

    def __init__(self, config: Configuration, console: Callable[[str], None] = print, path: Optional[Path] = None):
        self.config = config
        self.console = console
        self.path = Path(path) if path is not None else config.report_path()
        self._fh = None
        self.matches = 0

    def open(self) -> "ReportWriter":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("w", encoding="utf-8", newline="\n")
        for line in header_lines(self.config):
            self._fh.write(line + "\n")
        return self

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> "ReportWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def write_match(self, label: str, similarity: float, path_a: str, path_b: str) -> None:
        if self._fh is None:
            raise RuntimeError("report is not open")
        self.console(console_match_line(label, similarity, path_a, path_b))
        self._fh.write(match_line(similarity, path_a, path_b) + "\n")
        self.matches += 1
