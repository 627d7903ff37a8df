"""
Visualization Module for the Senate Agreement Dashboard.

Renders the agreement views and re-renders them whenever the member
selection changes.
"""

import logging
from typing import Optional, List, Tuple
from pathlib import Path
import numpy as np
import networkx as nx
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
import seaborn as sns

from .events import EventDispatcher, EventType
from .network_builder import AgreementNetworkBuilder
from .state import Congress

logger = logging.getLogger(__name__)


class AgreementVisualizer:
    """
    Creates visualizations of Senate voting agreement.

    Views:
    - Agreement heatmap (selected members against everyone)
    - Mean agreement with the selection, per member
    - Agreement network
    """

    # Party color scheme
    PARTY_COLORS = {
        'Democrat': '#0015BC',      # Blue
        'Republican': '#E9141D',    # Red
        'Independent': '#808080',   # Gray
        'Other': '#FFD700',         # Gold
        'Unknown': '#C0C0C0',       # Silver
    }

    def __init__(
        self,
        congress: Congress,
        figsize: Tuple[int, int] = (12, 10),
        output_dir: str = "output/figures"
    ):
        """
        Initialize visualizer.

        Args:
            congress: Shared state to draw from.
            figsize: Default figure size for matplotlib plots.
            output_dir: Directory that ``refresh`` writes figures to.
        """
        self.congress = congress
        self.figsize = figsize
        self.output_dir = output_dir
        self.agreement_threshold = 50.0
        self.render_count = 0

    def _party_color(self, member_id) -> str:
        party = self.congress.members.loc[member_id, 'party_group']
        return self.PARTY_COLORS.get(party, '#808080')

    def _has_data(self) -> bool:
        return self.congress.agreement is not None and len(self.congress.agreement) > 0

    def _empty_plot(self, ax: plt.Axes, title: str):
        ax.text(0.5, 0.5, "No members loaded", ha='center', va='center', fontsize=12)
        ax.set_title(title, fontsize=14)
        ax.axis('off')

    def _save(self, fig: plt.Figure, save_path: Optional[str]):
        plt.tight_layout()
        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')
            logger.info(f"Saved figure to {save_path}")

    def _ordered_members(self) -> List:
        """Member ids ordered by party group, then name."""
        members = self.congress.members.loc[list(self.congress.agreement.index)]
        ordered = members.sort_values(['party_group', 'name'], kind='mergesort')
        return list(ordered.index)

    def plot_agreement_heatmap(
        self,
        title: str = "Senate Voting Agreement (%)",
        save_path: Optional[str] = None,
        ax: Optional[plt.Axes] = None
    ) -> plt.Figure:
        """
        Heatmap of agreement percentages.

        Rows are the selected members (all members when nothing is
        selected); columns are all members ordered by party.

        Args:
            title: Plot title.
            save_path: Optional path to save figure.
            ax: Optional matplotlib axes.

        Returns:
            Matplotlib figure.
        """
        if ax is None:
            fig, ax = plt.subplots(figsize=self.figsize)
        else:
            fig = ax.get_figure()

        if not self._has_data():
            logger.warning("No agreement data to plot")
            self._empty_plot(ax, title)
            self._save(fig, save_path)
            return fig

        columns = self._ordered_members()
        rows = self.congress.selected_members or columns
        matrix = self.congress.agreement.loc[rows, columns]

        names = self.congress.members['name']
        matrix = matrix.rename(index=names, columns=names)

        sns.heatmap(
            matrix.astype(float),
            cmap='RdYlBu',
            vmin=0, vmax=100,
            square=len(rows) == len(columns),
            cbar_kws={'label': 'Agreement (%)'},
            ax=ax,
            xticklabels=len(columns) <= 60,
            yticklabels=len(rows) <= 60
        )

        ax.set_xlabel('')
        ax.set_ylabel('')
        ax.set_title(title, fontsize=14)

        self._save(fig, save_path)
        return fig

    def plot_selection_agreement(
        self,
        title: Optional[str] = None,
        top_n: Optional[int] = 40,
        save_path: Optional[str] = None,
        ax: Optional[plt.Axes] = None
    ) -> plt.Figure:
        """
        Bar chart of each member's mean agreement with the selection.

        Args:
            title: Plot title; derived from the selection when omitted.
            top_n: Only show the N most agreeing members (None for all).
            save_path: Optional path to save figure.
            ax: Optional matplotlib axes.

        Returns:
            Matplotlib figure.
        """
        selected = self.congress.selected_members
        if title is None:
            if selected:
                shown = ", ".join(self.congress.member_name(m) for m in selected[:3])
                if len(selected) > 3:
                    shown += f" +{len(selected) - 3}"
                title = f"Agreement with {shown}"
            else:
                title = "Mean Agreement with Other Senators"

        if ax is None:
            fig, ax = plt.subplots(figsize=self.figsize)
        else:
            fig = ax.get_figure()

        if not self._has_data():
            logger.warning("No agreement data to plot")
            self._empty_plot(ax, title)
            self._save(fig, save_path)
            return fig

        scores = self.congress.agreement_with_selection().drop(selected, errors='ignore')
        scores = scores.dropna().sort_values(ascending=False)
        if top_n is not None:
            scores = scores.head(top_n)

        labels = [self.congress.member_name(m) for m in scores.index]
        colors = [self._party_color(m) for m in scores.index]

        y = np.arange(len(scores))
        ax.barh(y, scores.to_numpy(), color=colors, alpha=0.8)
        ax.set_yticks(y)
        ax.set_yticklabels(labels, fontsize=7)
        ax.invert_yaxis()
        ax.set_xlim(0, 100)
        ax.set_xlabel('Agreement (%)', fontsize=12)
        ax.set_title(title, fontsize=14)
        ax.grid(True, axis='x', alpha=0.3)

        parties = {self.congress.members.loc[m, 'party_group'] for m in scores.index}
        patches = [
            mpatches.Patch(color=color, label=party)
            for party, color in self.PARTY_COLORS.items()
            if party in parties
        ]
        if patches:
            ax.legend(handles=patches, loc='lower right')

        self._save(fig, save_path)
        return fig

    def plot_agreement_network(
        self,
        agreement_threshold: Optional[float] = None,
        title: str = "Senate Agreement Network",
        show_labels: bool = False,
        edge_alpha: float = 0.3,
        seed: int = 42,
        save_path: Optional[str] = None,
        ax: Optional[plt.Axes] = None
    ) -> plt.Figure:
        """
        Draw the agreement network, highlighting selected members.

        Args:
            agreement_threshold: Minimum agreement percentage for an edge.
            title: Plot title.
            show_labels: Whether to show node labels.
            edge_alpha: Edge transparency.
            seed: Random seed for reproducible layouts.
            save_path: Optional path to save figure.
            ax: Optional matplotlib axes.

        Returns:
            Matplotlib figure.
        """
        if agreement_threshold is None:
            agreement_threshold = self.agreement_threshold

        if ax is None:
            fig, ax = plt.subplots(1, 1, figsize=self.figsize)
        else:
            fig = ax.get_figure()

        if not self._has_data():
            logger.warning("No agreement data to plot")
            self._empty_plot(ax, title)
            self._save(fig, save_path)
            return fig

        builder = AgreementNetworkBuilder(self.congress.agreement, self.congress.members)
        G = builder.build_agreement_network(agreement_threshold=agreement_threshold)

        pos = nx.spring_layout(G, seed=seed, k=1 / np.sqrt(len(G)))

        selected = set(self.congress.selected_members)
        node_colors = [self.PARTY_COLORS.get(G.nodes[n].get('party_group'), '#808080')
                       for n in G.nodes()]
        sizes = [300 if n in selected else 100 for n in G.nodes()]
        edge_colors = ['black' if n in selected else 'white' for n in G.nodes()]

        edge_weights = [d.get('weight', 1.0) for _, _, d in G.edges(data=True)]
        if edge_weights:
            max_weight = max(edge_weights)
            edge_widths = [w / max_weight * 2 for w in edge_weights]
            nx.draw_networkx_edges(G, pos, ax=ax, alpha=edge_alpha,
                                   width=edge_widths, edge_color='gray')
        nx.draw_networkx_nodes(G, pos, ax=ax, node_color=node_colors,
                               node_size=sizes, edgecolors=edge_colors, alpha=0.8)

        if show_labels or selected:
            label_nodes = G.nodes() if show_labels else selected
            labels = {n: G.nodes[n].get('name', str(n))[:15] for n in label_nodes}
            nx.draw_networkx_labels(G, pos, labels=labels, ax=ax, font_size=7)

        patches = [
            mpatches.Patch(color=color, label=party)
            for party, color in self.PARTY_COLORS.items()
            if any(G.nodes[n].get('party_group') == party for n in G.nodes())
        ]
        ax.legend(handles=patches, loc='upper left')

        ax.set_title(f"{title} (edges >= {agreement_threshold:g}%)", fontsize=14)
        ax.axis('off')

        self._save(fig, save_path)
        return fig

    def create_dashboard(
        self,
        output_dir: Optional[str] = None,
        prefix: str = ""
    ) -> List[str]:
        """
        Render every view to image files.

        Args:
            output_dir: Directory to save figures (defaults to ``self.output_dir``).
            prefix: Filename prefix.

        Returns:
            List of saved file paths.
        """
        output_dir = output_dir or self.output_dir
        Path(output_dir).mkdir(parents=True, exist_ok=True)
        saved_files = []

        views = [
            ("agreement_heatmap", self.plot_agreement_heatmap),
            ("selection_agreement", self.plot_selection_agreement),
            ("agreement_network", self.plot_agreement_network),
        ]
        for name, plot in views:
            path = f"{output_dir}/{prefix}{name}.png"
            fig, ax = plt.subplots(figsize=self.figsize)
            try:
                plot(save_path=path, ax=ax)
            finally:
                plt.close(fig)
            saved_files.append(path)

        self.render_count += 1
        logger.info(f"Created {len(saved_files)} visualizations in {output_dir}")
        return saved_files

    def refresh(self) -> List[str]:
        """Re-render all views into ``self.output_dir``."""
        return self.create_dashboard()

    def attach(self, dispatcher: EventDispatcher):
        """Re-render all views whenever the selection changes."""
        dispatcher.subscribe(EventType.SELECTION_CHANGED, self.refresh)
