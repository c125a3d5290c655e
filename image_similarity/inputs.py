"""Input resolution: mixed path / number / flag tokens -> Configuration + candidates.

Tokens are read once, left to right. Numbers set the similarity threshold
(values in [0, 1]) or the resize dimensions (values above 1, rows first);
``-p`` makes the next number the pixel precision instead. Existing
directories are expanded one level after all tokens have been read.
"""
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .config import Configuration, format_number
from .logging import get_logger

logger = get_logger(__name__)

FLAG_PRECISION = "-p"
FLAG_RESIZE = "-r"
FLAG_NO_RESIZE = "-nr"
FLAG_STORE = "-s"
FLAG_NO_STORE = "-ns"

KNOWN_FLAGS = (FLAG_PRECISION, FLAG_RESIZE, FLAG_NO_RESIZE, FLAG_STORE, FLAG_NO_STORE)


class UsageError(Exception):
    """Fatal input problem: nothing usable to compare."""


@dataclass
class Token:
    kind: str  # "number", "dir", "file", "flag" or "invalid"
    raw: str
    numbers: Tuple[float, ...] = ()


@dataclass
class ResolvedInputs:
    config: Configuration
    candidates: List[str] = field(default_factory=list)
    directories: List[str] = field(default_factory=list)


def parse_numbers(raw: str) -> Optional[Tuple[float, ...]]:
    """Parse ``"0.9"`` or ``"256,256"``; None when the token is not numeric."""
    parts = raw.split(",")
    values = []
    for part in parts:
        part = part.strip()
        if not part:
            return None
        try:
            value = float(part)
        except ValueError:
            return None
        if not math.isfinite(value):
            return None
        values.append(value)
    return tuple(values)


def classify_token(raw) -> Token:
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return Token("number", str(raw), (float(raw),))
    raw = str(raw)
    numbers = parse_numbers(raw)
    if numbers is not None:
        return Token("number", raw, numbers)
    if os.path.isdir(raw):
        return Token("dir", raw)
    if os.path.exists(raw):
        return Token("file", raw)
    if raw in KNOWN_FLAGS:
        return Token("flag", raw)
    return Token("invalid", raw)


def _dimension(value: float) -> int:
    return int(math.ceil(value))


def parse_tokens(
    tokens: Sequence,
    console: Callable[[str], None] = print,
    output_dir: Path = Path("."),
) -> ResolvedInputs:
    """Run the left-to-right pass; directories are returned unexpanded."""
    if not tokens:
        raise UsageError("MUST INPUT IMAGE(S) AND/OR FOLDER(S)")

    threshold = 1.0
    precision: float = 0
    resize = False
    store = True
    rows: Optional[int] = None
    cols: Optional[int] = None
    read_precision = False

    files: List[str] = []
    directories: List[str] = []

    for raw in tokens:
        tok = classify_token(raw)

        if tok.kind == "number":
            if read_precision:
                # only the first value of the token is looked at
                if tok.numbers[0] >= 0:
                    precision = tok.numbers[0]
                read_precision = False
                continue
            for value in tok.numbers:
                if value < 0:
                    raise UsageError(f"INPUT NUMBERS MUST BE POSITIVE: {format_number(value)}")
                if value <= 1:
                    threshold = value
                elif rows is None:
                    rows = _dimension(value)
                elif cols is None:
                    cols = _dimension(value)
                else:
                    logger.debug("Ignoring extra dimension value %s", value)
            continue

        if tok.kind == "dir":
            directories.append(tok.raw)
        elif tok.kind == "file":
            files.append(tok.raw)
        elif tok.raw == FLAG_NO_RESIZE:
            resize = False
        elif tok.raw == FLAG_NO_STORE:
            store = False
        elif tok.raw == FLAG_PRECISION:
            read_precision = True
        elif tok.raw == FLAG_RESIZE:
            resize = True
        elif tok.raw == FLAG_STORE:
            store = True
        else:
            console(f"NOT A FILE OR DIRECTORY: {tok.raw}")

    if isinstance(precision, float) and precision.is_integer():
        precision = int(precision)

    config = Configuration(
        similarity_threshold=threshold,
        pixel_precision=precision,
        resize=resize,
        rows=rows,
        cols=cols,
        store_images=store,
        output_dir=Path(output_dir),
    )
    return ResolvedInputs(config=config, candidates=files, directories=directories)


def expand_directories(directories: Sequence[str], console: Callable[[str], None] = print) -> List[str]:
    """List the immediate entries of each directory, in argument order.

    Entries are not filtered: sub-directories and non-image files are left
    for the decoder to reject.
    """
    found: List[str] = []
    if not directories:
        return found
    console(f"SEARCHING FOR IMAGES IN {len(directories)} FOLDER(S)\n")
    for dir_name in directories:
        try:
            entries = sorted(os.listdir(dir_name))
        except OSError as exc:
            logger.debug("Cannot list %s: %s", dir_name, exc)
            entries = []
        if not entries:
            console(f"NO FILES FOUND INSIDE: {dir_name}")
            continue
        for name in entries:
            found.append(os.path.join(dir_name, name))
    return found


def _dedupe(paths: Sequence[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for p in paths:
        key = os.path.normpath(p)
        if key in seen:
            continue
        seen.add(key)
        out.append(p)
    return out


def resolve_inputs(
    tokens: Sequence,
    console: Callable[[str], None] = print,
    output_dir: Path = Path("."),
) -> ResolvedInputs:
    """Parse ``tokens`` and expand directories into the raw candidate list.

    Raises UsageError when there are no tokens, a negative number is given,
    or no candidate paths remain after expansion.
    """
    resolved = parse_tokens(tokens, console=console, output_dir=output_dir)
    candidates = list(resolved.candidates)
    candidates.extend(expand_directories(resolved.directories, console=console))
    candidates = _dedupe(candidates)
    if not candidates:
        raise UsageError("NO VALID IMAGE FILES FOUND")
    resolved.candidates = candidates
    logger.debug("Resolved %d candidate path(s) with %s", len(candidates), resolved.config)
    return resolved
