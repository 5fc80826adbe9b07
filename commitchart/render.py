"""
Chart rendering for commitchart.

Draws a weekly series as a line with point markers and writes it to an image
file named after the repository.
"""
from pathlib import Path
from typing import Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from commitchart.aggregation import WeeklySeries  # noqa: E402
from commitchart.errors import RenderError  # noqa: E402
from commitchart.filenames import sanitize_filename  # noqa: E402
from commitchart.ticks import Tick  # noqa: E402

CM_PER_INCH = 2.54
Y_LABEL = "Number of Commits (weekly)"


class ChartRenderer:
    """Writes one chart image per repository into an output directory."""

    def __init__(
        self,
        output_dir: Path,
        image_format: str = "png",
        width_cm: float = 40,
        height_cm: float = 20,
        dpi: int = 100,
    ):
        self.output_dir = Path(output_dir)
        self.image_format = image_format
        self.figsize = (width_cm / CM_PER_INCH, height_cm / CM_PER_INCH)
        self.dpi = dpi

    def output_path(self, name: str) -> Path:
        return self.output_dir / f"{sanitize_filename(name)}.{self.image_format}"

    def render(self, name: str, series: WeeklySeries, ticks: Sequence[Tick]) -> Path:
        """
        Draw a weekly series and save it.

        Args:
            name: Display name, used as title and file name
            series: Weekly commit counts
            ticks: Time axis ticks; labelled ones become major ticks

        Returns:
            Path of the written image
        """
        path = self.output_path(name)
        fig, ax = plt.subplots(figsize=self.figsize)
        try:
            xs = [start for start, _ in series.buckets]
            ys = [count for _, count in series.buckets]

            ax.set_title(name)
            ax.set_ylabel(Y_LABEL)
            ax.grid(True)
            ax.plot(xs, ys, color="#00ff00", linestyle="-")
            ax.plot(xs, ys, color="#ff0000", linestyle="none", marker="o")

            major = [tick for tick in ticks if tick.is_labeled]
            minor = [tick for tick in ticks if not tick.is_labeled]
            ax.set_xticks([tick.value for tick in major], labels=[tick.label for tick in major])
            ax.set_xticks([tick.value for tick in minor], minor=True)

            # The y scale is pinned to the busiest week
            if series.max_count > 0:
                ax.set_ylim(top=series.max_count)

            self.output_dir.mkdir(parents=True, exist_ok=True)
            fig.savefig(path, format=self.image_format, dpi=self.dpi)
        except Exception as exc:
            raise RenderError(name, str(exc), path) from exc
        finally:
            plt.close(fig)

        return path
