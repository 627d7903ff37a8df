"""Tests for the visualization module."""

import pytest
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from unittest.mock import patch

from senate_agreement.events import EventDispatcher, EventType
from senate_agreement.state import Congress
from senate_agreement.visualization import AgreementVisualizer


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


class TestAgreementVisualizer:
    """Test cases for AgreementVisualizer."""

    def test_heatmap(self, loaded_congress):
        """Test heatmap of all members."""
        fig = AgreementVisualizer(loaded_congress).plot_agreement_heatmap()
        assert isinstance(fig, plt.Figure)

    def test_heatmap_selection_rows(self, loaded_congress):
        """Test heatmap rows follow the selection."""
        loaded_congress.select_members(["D1"])
        fig = AgreementVisualizer(loaded_congress).plot_agreement_heatmap()

        labels = [t.get_text() for t in fig.axes[0].get_yticklabels()]
        assert labels == ["Dem One"]

    def test_selection_agreement_title(self, loaded_congress):
        """Test the bar chart names the selected members."""
        loaded_congress.select_members(["R1"])
        fig = AgreementVisualizer(loaded_congress).plot_selection_agreement()

        ax = fig.axes[0]
        assert ax.get_title() == "Agreement with Rep One"
        # Selected member is not plotted against itself
        assert len(ax.patches) == 4

    def test_network(self, loaded_congress, tmp_path):
        """Test network plot is saved."""
        path = tmp_path / "network.png"
        AgreementVisualizer(loaded_congress).plot_agreement_network(save_path=str(path))
        assert path.exists()

    def test_empty_data(self):
        """Test views render a placeholder without data."""
        viz = AgreementVisualizer(Congress())

        for plot in (viz.plot_agreement_heatmap, viz.plot_selection_agreement,
                     viz.plot_agreement_network):
            fig = plot()
            assert fig.axes[0].texts[0].get_text() == "No members loaded"

    def test_single_member(self):
        """Test views with one member and no comparisons."""
        congress = Congress()
        congress.meta_data = {"members": [{"id": 1, "name": "A"}]}
        congress.data = {"votes": [{"memberId": 1, "bill": "HR1", "vote": "Yea"}]}
        congress.get_agreement_percent()

        viz = AgreementVisualizer(congress)
        viz.plot_agreement_heatmap()
        viz.plot_selection_agreement()
        viz.plot_agreement_network()

    def test_create_dashboard(self, loaded_congress, tmp_path):
        """Test every view is written to disk."""
        viz = AgreementVisualizer(loaded_congress)

        saved = viz.create_dashboard(output_dir=str(tmp_path / "figures"), prefix="s114_")

        assert len(saved) == 3
        for path in saved:
            assert (tmp_path / "figures" / path.rsplit("/", 1)[-1]).exists()
        assert viz.render_count == 1

    def test_create_dashboard_closes_figure_on_error(self, loaded_congress, tmp_path):
        """Test a failing view does not leave its figure open."""
        viz = AgreementVisualizer(loaded_congress)
        open_before = plt.get_fignums()

        with patch.object(viz, "plot_selection_agreement", side_effect=RuntimeError("draw failed")):
            with pytest.raises(RuntimeError, match="draw failed"):
                viz.create_dashboard(output_dir=str(tmp_path))

        assert plt.get_fignums() == open_before
        assert viz.render_count == 0

    def test_attach_refreshes_on_selection(self, loaded_congress, tmp_path):
        """Test publishing a selection change re-renders the views."""
        dispatcher = EventDispatcher()
        viz = AgreementVisualizer(loaded_congress, output_dir=str(tmp_path))
        viz.attach(dispatcher)

        assert dispatcher.subscriber_count(EventType.SELECTION_CHANGED) == 1

        loaded_congress.select_members(["D2"])
        dispatcher.selection_changed()
        dispatcher.selection_changed()

        assert viz.render_count == 2
        assert (tmp_path / "agreement_heatmap.png").exists()
