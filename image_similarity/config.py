"""Run configuration and the compact number format used in report names."""
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

REPORT_PREFIX = "similar_images"


def format_number(value: float) -> str:
    """Format like the report expects: ``1``, ``0.9``, ``0.93333``."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.5g}"


@dataclass(frozen=True)
class Configuration:
    similarity_threshold: float = 1.0
    pixel_precision: float = 0
    resize: bool = False
    rows: Optional[int] = None
    cols: Optional[int] = None
    store_images: bool = True
    output_dir: Path = Path(".")

    @property
    def exact_fast_path(self) -> bool:
        # precision 1, not 0
        return self.similarity_threshold == 1 and self.pixel_precision == 1

    @property
    def target_size(self) -> Optional[tuple]:
        if not self.resize or self.rows is None or self.cols is None:
            return None
        return (self.rows, self.cols)

    def with_dimensions(self, rows: int, cols: int) -> "Configuration":
        """Fill in whichever resize dimension is still unset."""
        return replace(
            self,
            rows=self.rows if self.rows is not None else int(rows),
            cols=self.cols if self.cols is not None else int(cols),
        )

    def report_name(self) -> str:
        return (
            f"{REPORT_PREFIX}_p{format_number(self.pixel_precision)}"
            f"_t{format_number(self.similarity_threshold)}.txt"
        )

    def report_path(self) -> Path:
        return Path(self.output_dir) / self.report_name()
