"""
Data Preprocessing Module for the Senate Agreement Dashboard.

Turns the raw metadata and voting-record payloads into member and vote
tables, a member x bill vote matrix, and pairwise agreement percentages.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
import numpy as np
import pandas as pd
from scipy.sparse import csr_matrix, lil_matrix

logger = logging.getLogger(__name__)


class VoteRecordPreprocessor:
    """
    Preprocesses Senate metadata and voting records for agreement analysis.

    Payload fields:
    - Metadata members: ``id``, ``name``, ``party``, ``state``
    - Record votes: ``memberId``, ``bill``, ``vote``
    """

    # Vote string mappings (compared lower-cased)
    VOTE_CODES = {
        "yea": 1,
        "aye": 1,
        "yes": 1,
        "nay": -1,
        "no": -1,
        # Not counted toward agreement
        "present": 0,
        "not voting": 0,
        "absent": 0,
    }

    PARTY_CODES = {
        "D": "Democrat",
        "R": "Republican",
        "I": "Independent",
        "ID": "Independent",
    }

    PARTY_GROUPS = ("Democrat", "Republican", "Independent")

    def __init__(self, meta_data: Any, data: Any):
        """
        Initialize preprocessor with raw payloads.

        Args:
            meta_data: Parsed metadata payload.
            data: Parsed voting-record payload.
        """
        self.meta_data = meta_data
        self.data = data

        # Populated by preprocessing methods
        self.members = None
        self.votes = None
        self.vote_matrix = None
        self.member_ids = None
        self.bill_ids = None

    @staticmethod
    def _extract_list(payload: Any, key: str) -> List[Dict[str, Any]]:
        """Return the record list from ``{key: [...]}`` or a bare list."""
        if payload is None:
            return []
        if isinstance(payload, dict):
            records = payload.get(key, [])
        else:
            records = payload

        if not isinstance(records, list):
            raise ValueError(f"Expected a list of {key}, got {type(records).__name__}")
        return records

    def _party_group(self, party: Optional[str]) -> str:
        """Map a party code or name to a display group."""
        if party is None or (isinstance(party, float) and np.isnan(party)):
            return "Unknown"
        party = str(party).strip()
        if party.upper() in self.PARTY_CODES:
            return self.PARTY_CODES[party.upper()]
        if party in self.PARTY_GROUPS:
            return party
        return "Other"

    def preprocess_members(self) -> pd.DataFrame:
        """
        Clean member metadata.

        Returns:
            Members DataFrame indexed by ``member_id`` with name, party,
            party_group and state columns.
        """
        records = self._extract_list(self.meta_data, "members")

        rows = []
        for record in records:
            if not isinstance(record, dict) or "id" not in record:
                raise ValueError(f"Member entry without an id: {record!r}")
            rows.append({
                "member_id": record["id"],
                "name": str(record.get("name") or record["id"]),
                "party": record.get("party"),
                "state": record.get("state") or "XX",
            })

        df = pd.DataFrame(rows, columns=["member_id", "name", "party", "state"])
        df["party_group"] = df["party"].apply(self._party_group)
        df = df.drop_duplicates(subset="member_id", keep="last").set_index("member_id")

        self.members = df
        logger.info(f"Preprocessed {len(df)} member records")
        return df

    def preprocess_votes(self) -> pd.DataFrame:
        """
        Clean voting records.

        Votes cast by members missing from the metadata are dropped.

        Returns:
            Votes DataFrame with member_id, bill, vote and vote_value columns.
        """
        if self.members is None:
            self.preprocess_members()

        records = self._extract_list(self.data, "votes")

        rows = []
        for record in records:
            if not isinstance(record, dict):
                raise ValueError(f"Vote entry is not an object: {record!r}")
            rows.append({
                "member_id": record.get("memberId"),
                "bill": record.get("bill"),
                "vote": record.get("vote"),
            })

        df = pd.DataFrame(rows, columns=["member_id", "bill", "vote"])

        # Map vote strings to standardized values (1=Yea, -1=Nay, 0=Other)
        df["vote_value"] = (
            df["vote"].astype(str).str.strip().str.lower().map(self.VOTE_CODES)
        )
        df["vote_value"] = df["vote_value"].fillna(0).astype(int)

        known = df["member_id"].isin(self.members.index)
        if not known.all():
            logger.warning(f"Dropping {(~known).sum()} votes from members missing in metadata")
            df = df[known]

        df = df.dropna(subset=["bill"]).reset_index(drop=True)

        self.votes = df
        logger.info(f"Preprocessed {len(df)} vote records")
        return df

    def preprocess_all(self) -> Dict[str, pd.DataFrame]:
        """
        Run all preprocessing steps.

        Returns:
            Dictionary with cleaned dataframes.
        """
        return {
            "members": self.preprocess_members(),
            "votes": self.preprocess_votes(),
        }

    def create_vote_matrix(self) -> Tuple[csr_matrix, np.ndarray, np.ndarray]:
        """
        Create sparse vote matrix (members x bills).

        Every metadata member gets a row, including members without votes.
        A repeated vote on the same bill overwrites the earlier one.

        Returns:
            Tuple of (sparse_matrix, member_ids, bill_ids)
        """
        if self.votes is None:
            self.preprocess_all()

        member_ids = self.members.index.to_numpy()
        bill_ids = self.votes["bill"].unique()

        member_to_idx = {member: idx for idx, member in enumerate(member_ids)}
        bill_to_idx = {bill: idx for idx, bill in enumerate(bill_ids)}

        matrix = lil_matrix((len(member_ids), len(bill_ids)), dtype=np.int8)

        for row in self.votes.itertuples(index=False):
            matrix[member_to_idx[row.member_id], bill_to_idx[row.bill]] = row.vote_value

        # Convert to CSR for efficient operations
        matrix = csr_matrix(matrix)

        self.vote_matrix = matrix
        self.member_ids = member_ids
        self.bill_ids = bill_ids

        logger.info(f"Created vote matrix: {matrix.shape[0]} members x {matrix.shape[1]} bills")
        return matrix, member_ids, bill_ids

    @staticmethod
    def compute_agreement_rate(
        votes1: np.ndarray,
        votes2: np.ndarray,
        exclude_zeros: bool = True
    ) -> float:
        """
        Compute agreement rate between two vote vectors.

        Args:
            votes1: First vote vector (1=Yea, -1=Nay, 0=Other).
            votes2: Second vote vector.
            exclude_zeros: If True, only count votes where both members voted.

        Returns:
            Agreement rate (0.0 to 1.0), NaN when there is nothing to compare.
        """
        votes1 = np.asarray(votes1)
        votes2 = np.asarray(votes2)

        if exclude_zeros:
            mask = (votes1 != 0) & (votes2 != 0)
            if mask.sum() == 0:
                return np.nan
            votes1 = votes1[mask]
            votes2 = votes2[mask]

        total = len(votes1)
        if total == 0:
            return np.nan
        return (votes1 == votes2).sum() / total

    def compute_agreement_matrix(self) -> pd.DataFrame:
        """
        Compute pairwise agreement percentages.

        Returns:
            Square DataFrame indexed by member_id on both axes. Pairs with no
            shared Yea/Nay vote are NaN; the diagonal is 100.
        """
        if self.vote_matrix is None:
            self.create_vote_matrix()

        dense = self.vote_matrix.toarray().astype(np.int64)
        yea = (dense == 1).astype(np.int64)
        nay = (dense == -1).astype(np.int64)
        voted = yea + nay

        shared = voted @ voted.T
        agreed = yea @ yea.T + nay @ nay.T

        with np.errstate(divide="ignore", invalid="ignore"):
            percent = np.where(shared > 0, agreed / shared * 100.0, np.nan)
        np.fill_diagonal(percent, 100.0)

        agreement = pd.DataFrame(percent, index=self.member_ids, columns=self.member_ids)
        agreement.index.name = "member_id"
        agreement.columns.name = "member_id"

        logger.info(f"Computed agreement matrix for {len(self.member_ids)} members")
        return agreement
