"""Tests for the network builder module."""

import pytest
import numpy as np
import pandas as pd
import networkx as nx

from senate_agreement.network_builder import AgreementNetworkBuilder


@pytest.fixture
def sample_network_data():
    """Agreement matrix with two blocs and one member without shared votes."""
    ids = ['dem_1', 'dem_2', 'rep_1', 'rep_2', 'new_1']
    agreement = pd.DataFrame([
        [100.0, 90.0, 20.0, 10.0, np.nan],
        [90.0, 100.0, 30.0, 25.0, np.nan],
        [20.0, 30.0, 100.0, 95.0, np.nan],
        [10.0, 25.0, 95.0, 100.0, np.nan],
        [np.nan, np.nan, np.nan, np.nan, 100.0],
    ], index=ids, columns=ids)

    members = pd.DataFrame({
        'name': ['Democrat 1', 'Democrat 2', 'Republican 1', 'Republican 2', 'Newcomer'],
        'party': ['D', 'D', 'R', 'R', None],
        'party_group': ['Democrat', 'Democrat', 'Republican', 'Republican', 'Unknown'],
        'state': ['CA', 'NY', 'TX', 'FL', 'XX'],
    }, index=pd.Index(ids, name='member_id'))

    return agreement, members


class TestAgreementNetworkBuilder:
    """Test cases for AgreementNetworkBuilder."""

    def test_init(self, sample_network_data):
        """Test builder initialization."""
        agreement, members = sample_network_data
        builder = AgreementNetworkBuilder(agreement, members)

        assert builder.agreement is agreement
        assert builder.network is None

    def test_build_agreement_network(self, sample_network_data):
        """Test building network with the default threshold."""
        builder = AgreementNetworkBuilder(*sample_network_data)

        G = builder.build_agreement_network()

        assert isinstance(G, nx.Graph)
        assert G.number_of_nodes() == 5
        assert set(map(frozenset, G.edges())) == {
            frozenset({'dem_1', 'dem_2'}),
            frozenset({'rep_1', 'rep_2'}),
        }
        assert G['dem_1']['dem_2']['agreement'] == pytest.approx(90.0)
        assert G['dem_1']['dem_2']['weight'] == pytest.approx(0.9)

    def test_threshold(self, sample_network_data):
        """Test that a lower threshold adds cross-party edges."""
        builder = AgreementNetworkBuilder(*sample_network_data)

        G = builder.build_agreement_network(agreement_threshold=25.0)

        assert G.has_edge('dem_2', 'rep_1')
        assert G.has_edge('dem_2', 'rep_2')
        assert not G.has_edge('dem_1', 'rep_1')

    def test_nan_never_connects(self, sample_network_data):
        """Test members without shared votes stay isolated."""
        builder = AgreementNetworkBuilder(*sample_network_data)

        G = builder.build_agreement_network(agreement_threshold=0.0)

        assert G.degree('new_1') == 0

    def test_exclude_isolates(self, sample_network_data):
        """Test removing isolated nodes."""
        builder = AgreementNetworkBuilder(*sample_network_data)

        G = builder.build_agreement_network(include_all_nodes=False)

        assert 'new_1' not in G
        assert G.number_of_nodes() == 4

    def test_node_attributes(self, sample_network_data):
        """Test node attributes are set."""
        builder = AgreementNetworkBuilder(*sample_network_data)

        G = builder.build_agreement_network()

        attrs = G.nodes['dem_1']
        assert attrs['name'] == 'Democrat 1'
        assert attrs['party_group'] == 'Democrat'
        assert attrs['state'] == 'CA'

    def test_get_subgraph_by_party(self, sample_network_data):
        """Test party subgraph extraction."""
        builder = AgreementNetworkBuilder(*sample_network_data)

        subgraph = builder.get_subgraph_by_party(['Republican'])

        assert set(subgraph.nodes()) == {'rep_1', 'rep_2'}
        assert subgraph.number_of_edges() == 1
