"""
Shared application state for the Senate Agreement Dashboard.

A single ``Congress`` object is created at startup and passed to the
loader, the analysis and the views.
"""

import logging
from typing import Any, Hashable, Iterable, List, Optional
import numpy as np
import pandas as pd

from .preprocessing import VoteRecordPreprocessor

logger = logging.getLogger(__name__)


class Congress:
    """
    Loaded Senate data plus the derived aggregates and member selection.

    ``meta_data`` and ``data`` hold the payloads exactly as parsed; the
    normalised ``members``/``votes`` tables and the ``agreement`` matrix are
    filled in by ``get_agreement_percent``.
    """

    def __init__(self):
        # JSON ``null`` is a valid payload, so assignment marks a stage loaded
        self._meta_data: Any = None
        self._data: Any = None
        self._meta_data_loaded = False
        self._data_loaded = False

        self.members: Optional[pd.DataFrame] = None
        self.votes: Optional[pd.DataFrame] = None
        self.agreement: Optional[pd.DataFrame] = None

        self.selected_members: List[Hashable] = []

    @property
    def meta_data(self) -> Any:
        """Parsed metadata payload, ``None`` until loaded."""
        return self._meta_data

    @meta_data.setter
    def meta_data(self, value: Any):
        self._meta_data = value
        self._meta_data_loaded = True

    @property
    def data(self) -> Any:
        """Parsed voting-record payload, ``None`` until loaded."""
        return self._data

    @data.setter
    def data(self, value: Any):
        self._data = value
        self._data_loaded = True

    @property
    def is_loaded(self) -> bool:
        """True once both payloads have been assigned."""
        return self._meta_data_loaded and self._data_loaded

    def clear_members(self):
        """Reset the member selection."""
        if self.selected_members:
            logger.info(f"Cleared selection of {len(self.selected_members)} members")
        self.selected_members = []

    def get_agreement_percent(self) -> pd.DataFrame:
        """
        Compute member-to-member agreement percentages from the loaded data.

        Returns:
            Square agreement DataFrame (percent) indexed by member id.
        """
        if not self.is_loaded:
            raise RuntimeError("Metadata and records must be loaded before computing agreement")

        preprocessor = VoteRecordPreprocessor(self.meta_data, self.data)
        preprocessor.preprocess_all()

        self.members = preprocessor.members
        self.votes = preprocessor.votes
        self.agreement = preprocessor.compute_agreement_matrix()
        return self.agreement

    def _require_members(self) -> pd.DataFrame:
        if self.members is None:
            raise RuntimeError("Agreement has not been computed yet")
        return self.members

    def select_members(self, member_ids: Iterable[Hashable]):
        """
        Replace the selection.

        Args:
            member_ids: Member ids to select; duplicates are ignored.

        Raises:
            KeyError: If any id is not a known member.
        """
        members = self._require_members()
        selection = list(dict.fromkeys(member_ids))

        unknown = [m for m in selection if m not in members.index]
        if unknown:
            raise KeyError(f"Unknown member ids: {unknown}")

        self.selected_members = selection
        logger.info(f"Selected {len(selection)} members")

    def toggle_member(self, member_id: Hashable):
        """Add ``member_id`` to the selection, or remove it if already selected."""
        if member_id in self.selected_members:
            self.selected_members = [m for m in self.selected_members if m != member_id]
        else:
            self.select_members(self.selected_members + [member_id])

    def member_name(self, member_id: Hashable) -> str:
        """Display name for a member id."""
        return str(self._require_members().loc[member_id, "name"])

    def agreement_with_selection(self) -> pd.Series:
        """
        Mean agreement of every member with the selected members.

        A member is never compared with itself. With no selection, each
        member is compared with every other member.

        Returns:
            Series of percentages indexed by member id (NaN when undefined).
        """
        if self.agreement is None:
            raise RuntimeError("Agreement has not been computed yet")

        columns = self.selected_members or list(self.agreement.columns)
        values = self.agreement[columns].to_numpy(dtype=float, copy=True)

        # Mask self-comparisons
        for j, member_id in enumerate(columns):
            i = self.agreement.index.get_loc(member_id)
            values[i, j] = np.nan

        with np.errstate(invalid="ignore"):
            if values.shape[1] == 0:
                means = np.full(values.shape[0], np.nan)
            else:
                counts = (~np.isnan(values)).sum(axis=1)
                sums = np.nansum(values, axis=1)
                means = np.where(counts > 0, sums / np.maximum(counts, 1), np.nan)

        return pd.Series(means, index=self.agreement.index, name="agreement")
