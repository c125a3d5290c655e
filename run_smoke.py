"""Run a simple smoke test of the pixel similarity pipeline without pytest.

Creates a temporary directory with tiny PNG fixtures and runs the main flow.
"""
import tempfile
from pathlib import Path

import numpy as np
from PIL import Image

from image_similarity import inputs, matcher, report, store


def _write_png(path: Path, value: int, size=(4, 4)) -> None:
    Image.fromarray(np.full(size, value, dtype=np.uint8)).save(path)


def run():
    with tempfile.TemporaryDirectory() as img_dir, tempfile.TemporaryDirectory() as out_dir:
        imgp = Path(img_dir)
        _write_png(imgp / "a.png", 10)
        _write_png(imgp / "b.png", 10)
        _write_png(imgp / "c.png", 12)
        _write_png(imgp / "d.png", 10, size=(8, 8))
        (imgp / "readme.txt").write_text("not an image", encoding="utf-8")

        print("Resolving inputs...")
        resolved = inputs.resolve_inputs([img_dir, "0.5", "-p", "2"], output_dir=Path(out_dir))
        print("Validating images...")
        st = store.build_store(resolved.candidates, resolved.config)
        print("Comparing pairs...")
        with report.ReportWriter(st.config) as writer:
            summary = matcher.scan_pairs(st.source, st.config, writer)
        print(f"Smoke run complete. Report: {writer.path} ({summary.matches} match(es))")


if __name__ == "__main__":
    run()
