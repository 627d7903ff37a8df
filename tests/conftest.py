"""Shared fixtures for the Senate Agreement Dashboard tests."""

import json

import pytest

from senate_agreement.state import Congress


@pytest.fixture
def sample_payloads():
    """Small metadata and records payloads with a clear party split."""
    meta_data = {
        "members": [
            {"id": "D1", "name": "Dem One", "party": "D", "state": "NY"},
            {"id": "D2", "name": "Dem Two", "party": "D", "state": "MA"},
            {"id": "R1", "name": "Rep One", "party": "R", "state": "TX"},
            {"id": "R2", "name": "Rep Two", "party": "R", "state": "KY"},
            {"id": "I1", "name": "Ind One", "party": "I", "state": "VT"},
        ]
    }

    votes = []
    ballots = {
        "B1": ["Yea", "Yea", "Nay", "Nay", "Yea"],
        "B2": ["Yea", "Yea", "Nay", "Nay", "Yea"],
        "B3": ["Nay", "Nay", "Yea", "Yea", "Nay"],
        "B4": ["Yea", "Nay", "Nay", "Nay", "Not Voting"],
    }
    for bill, casts in ballots.items():
        for member, cast in zip(["D1", "D2", "R1", "R2", "I1"], casts):
            votes.append({"memberId": member, "bill": bill, "vote": cast})

    return meta_data, {"votes": votes}


@pytest.fixture
def loaded_congress(sample_payloads):
    """Congress with sample payloads and computed agreement."""
    congress = Congress()
    congress.meta_data, congress.data = sample_payloads
    congress.clear_members()
    congress.get_agreement_percent()
    return congress


@pytest.fixture
def data_dir(tmp_path, sample_payloads):
    """Directory laid out like the project data directory."""
    meta_data, records = sample_payloads
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "Senate114Metadata.json").write_text(json.dumps(meta_data))
    (tmp_path / "data" / "SenateRecord114.json").write_text(json.dumps(records))
    return tmp_path
