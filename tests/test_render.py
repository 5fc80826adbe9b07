"""Tests for chart rendering."""
import pytest

from commitchart.aggregation import WEEK_SECONDS, WeeklySeries
from commitchart.errors import RenderError
from commitchart.render import ChartRenderer
from commitchart.ticks import generate_ticks

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def series():
    return WeeklySeries(
        buckets=[(0, 3), (WEEK_SECONDS, 1), (20 * WEEK_SECONDS, 5)],
        max_count=5,
    )


class TestChartRenderer:
    """Writing chart images."""

    def test_writes_png_named_after_repository(self, temp_dir, series):
        renderer = ChartRenderer(temp_dir / "output")
        ticks = generate_ticks(series.start, series.end)
        path = renderer.render("DDE Session Shell", series, ticks)

        assert path == temp_dir / "output" / "DDE_Session_Shell.png"
        assert path.read_bytes().startswith(PNG_SIGNATURE)

    def test_creates_output_directory(self, temp_dir, series):
        output_dir = temp_dir / "nested" / "charts"
        ChartRenderer(output_dir).render("Alpha", series, [])

        assert (output_dir / "Alpha.png").exists()

    def test_empty_series(self, temp_dir):
        path = ChartRenderer(temp_dir).render("Nothing Yet", WeeklySeries([], 0), [])
        assert path.exists()

    def test_other_image_format(self, temp_dir, series):
        path = ChartRenderer(temp_dir, image_format="svg").render("Alpha", series, [])

        assert path.suffix == ".svg"
        assert "<svg" in path.read_text()

    def test_unknown_format_is_a_render_error(self, temp_dir, series):
        with pytest.raises(RenderError) as excinfo:
            ChartRenderer(temp_dir, image_format="nope").render("Alpha", series, [])
        assert excinfo.value.name == "Alpha"

    def test_unwritable_output_is_a_render_error(self, temp_dir, series):
        blocked = temp_dir / "blocked"
        blocked.write_text("not a directory")

        with pytest.raises(RenderError):
            ChartRenderer(blocked).render("Alpha", series, [])

    def test_unexpected_backend_error_is_a_render_error(self, temp_dir, series, monkeypatch):
        """Failures from inside matplotlib surface as RenderError, not raw exceptions."""

        def broken_savefig(self, *args, **kwargs):
            raise RuntimeError("backend exploded")

        monkeypatch.setattr("matplotlib.figure.Figure.savefig", broken_savefig)

        with pytest.raises(RenderError, match="backend exploded") as excinfo:
            ChartRenderer(temp_dir).render("Alpha", series, [])
        assert excinfo.value.name == "Alpha"
