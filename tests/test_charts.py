"""
Tests für das Projekt-Diagramm (Matplotlib, ohne GUI-Backend).
"""

from matplotlib.figure import Figure

from planner_pioneer.charts import build_duration_figure, save_duration_chart


class TestDurationFigure:
    def test_bars_per_project(self):
        fig = build_duration_figure([("Website", 6.0, 7.2), ("App", 10.0, 10.0)])
        assert isinstance(fig, Figure)
        (ax,) = fig.axes
        # zwei Balken je Projekt (Basis + mit Faktoren)
        assert len(ax.patches) == 4
        assert [t.get_text() for t in ax.get_xticklabels()] == ["Website", "App"]

    def test_empty_series_shows_message(self):
        fig = build_duration_figure([])
        (ax,) = fig.axes
        assert len(ax.patches) == 0
        assert any("Keine Projekte" in t.get_text() for t in ax.texts)

    def test_save_png(self, tmp_path):
        out = tmp_path / "dauer.png"
        save_duration_chart([("Website", 6.0, 7.2)], out)
        assert out.exists()
        assert out.stat().st_size > 0
