"""
Network Construction Module for the Senate Agreement Dashboard.

Builds NetworkX graphs of senators connected by how often they vote alike.
"""

import logging
from typing import Dict, Hashable, List
import numpy as np
import pandas as pd
import networkx as nx

logger = logging.getLogger(__name__)


class AgreementNetworkBuilder:
    """
    Constructs agreement networks from a member x member agreement matrix.

    Nodes are members; an edge joins two members whose agreement percentage
    reaches the threshold.
    """

    def __init__(self, agreement: pd.DataFrame, members: pd.DataFrame):
        """
        Initialize network builder.

        Args:
            agreement: Square agreement DataFrame (percent) indexed by member id.
            members: Members DataFrame indexed by member id.
        """
        self.agreement = agreement
        self.members = members
        self.network = None

    def _get_node_attributes(self, member_id: Hashable) -> Dict:
        """Get node attributes for a member."""
        if member_id not in self.members.index:
            return {'id': str(member_id), 'name': str(member_id), 'party_group': 'Unknown'}

        row = self.members.loc[member_id]

        def to_native(val, default):
            if pd.isna(val):
                return default
            if hasattr(val, 'item'):
                return val.item()
            return val

        return {
            'id': str(member_id),
            'name': str(to_native(row.get('name'), member_id)),
            'party_group': str(to_native(row.get('party_group'), 'Unknown')),
            'state': str(to_native(row.get('state'), 'XX')),
        }

    def build_agreement_network(
        self,
        agreement_threshold: float = 50.0,
        include_all_nodes: bool = True
    ) -> nx.Graph:
        """
        Build weighted undirected network of member agreement.

        Args:
            agreement_threshold: Minimum agreement percentage to create an edge.
            include_all_nodes: If True, keep members without any edge.

        Returns:
            NetworkX Graph; edges carry ``agreement`` (percent) and
            ``weight`` (fraction).
        """
        G = nx.Graph()

        member_ids = list(self.agreement.index)
        for member_id in member_ids:
            G.add_node(member_id, **self._get_node_attributes(member_id))

        values = self.agreement.to_numpy(dtype=float)
        n = len(member_ids)
        for i in range(n):
            for j in range(i + 1, n):
                pct = values[i, j]
                if not np.isnan(pct) and pct >= agreement_threshold:
                    G.add_edge(member_ids[i], member_ids[j],
                               agreement=float(pct), weight=float(pct) / 100.0)

        if not include_all_nodes:
            isolates = list(nx.isolates(G))
            G.remove_nodes_from(isolates)
            logger.info(f"Removed {len(isolates)} isolated nodes")

        self.network = G
        logger.info(f"Built network with {G.number_of_nodes()} nodes and {G.number_of_edges()} edges")
        return G

    def get_subgraph_by_party(self, parties: List[str]) -> nx.Graph:
        """
        Extract subgraph containing only specified parties.

        Args:
            parties: List of party groups to include.

        Returns:
            Subgraph copy.
        """
        if self.network is None:
            self.build_agreement_network()

        nodes = [n for n, d in self.network.nodes(data=True)
                 if d.get('party_group') in parties]
        return self.network.subgraph(nodes).copy()
