"""
Analysis Module for the Senate Agreement Dashboard.

Summaries over the agreement matrix: party cohesion, cross-party agreement
and the most and least agreeing pairs of senators.
"""

import logging
from itertools import combinations
from typing import Dict
import numpy as np
import pandas as pd

from .state import Congress

logger = logging.getLogger(__name__)


class AgreementAnalyzer:
    """Computes agreement statistics for a loaded ``Congress``."""

    def __init__(self, congress: Congress):
        if congress.agreement is None or congress.members is None:
            raise ValueError("Congress has no agreement data; load it first")
        self.congress = congress
        self.agreement = congress.agreement
        self.members = congress.members

    def _party_members(self) -> Dict[str, list]:
        parties: Dict[str, list] = {}
        for member_id, party in self.members['party_group'].items():
            parties.setdefault(party, []).append(member_id)
        return parties

    def _mean_agreement(self, rows: list, cols: list, same_group: bool) -> float:
        block = self.agreement.loc[rows, cols].to_numpy(dtype=float, copy=True)
        if same_group:
            if len(rows) < 2:
                return np.nan
            np.fill_diagonal(block, np.nan)
        if np.isnan(block).all():
            return np.nan
        return float(np.nanmean(block))

    def compute_party_cohesion(self) -> Dict[str, float]:
        """
        Average agreement between members of the same party.

        Returns:
            Dictionary mapping party group to mean within-party agreement.
        """
        cohesion = {}
        for party, member_ids in self._party_members().items():
            cohesion[party] = self._mean_agreement(member_ids, member_ids, same_group=True)
        return cohesion

    def compute_cross_party_agreement(self) -> pd.DataFrame:
        """
        Average agreement between every pair of party groups.

        Returns:
            Symmetric DataFrame indexed by party group on both axes.
        """
        parties = self._party_members()
        names = sorted(parties)
        result = pd.DataFrame(np.nan, index=names, columns=names)

        for party_i in names:
            for party_j in names:
                result.loc[party_i, party_j] = self._mean_agreement(
                    parties[party_i], parties[party_j], same_group=(party_i == party_j)
                )
        return result

    def get_top_pairs(self, top_n: int = 10, most_agreeing: bool = True) -> pd.DataFrame:
        """
        Get the most (or least) agreeing pairs of members.

        Args:
            top_n: Number of pairs to return.
            most_agreeing: If False, return the least agreeing pairs.

        Returns:
            DataFrame with member ids, names and agreement.
        """
        rows = []
        for a, b in combinations(self.agreement.index, 2):
            pct = self.agreement.loc[a, b]
            if pd.isna(pct):
                continue
            rows.append({
                'member_a': a,
                'member_b': b,
                'name_a': self.congress.member_name(a),
                'name_b': self.congress.member_name(b),
                'agreement': float(pct),
            })

        pairs = pd.DataFrame(rows, columns=['member_a', 'member_b', 'name_a', 'name_b', 'agreement'])
        pairs = pairs.sort_values('agreement', ascending=not most_agreeing, kind='mergesort')
        return pairs.head(top_n).reset_index(drop=True)

    def generate_report(self) -> str:
        """
        Generate text report of agreement statistics.

        Returns:
            Formatted report string.
        """
        lines = [
            "=" * 60,
            "SENATE AGREEMENT REPORT",
            "=" * 60,
            f"Members: {len(self.members)}",
            f"Votes: {0 if self.congress.votes is None else len(self.congress.votes)}",
            "",
            "Party Cohesion (mean within-party agreement):",
        ]
        for party, value in sorted(self.compute_party_cohesion().items()):
            shown = "n/a" if pd.isna(value) else f"{value:.1f}%"
            lines.append(f"  {party}: {shown}")

        lines.append("")
        lines.append("Most Agreeing Pairs:")
        for row in self.get_top_pairs(top_n=5).itertuples():
            lines.append(f"  {row.name_a} / {row.name_b}: {row.agreement:.1f}%")

        lines.append("")
        lines.append("Least Agreeing Pairs:")
        for row in self.get_top_pairs(top_n=5, most_agreeing=False).itertuples():
            lines.append(f"  {row.name_a} / {row.name_b}: {row.agreement:.1f}%")

        lines.append("=" * 60)
        return "\n".join(lines)
