"""
Read-only views over training/inference examples.

A DataSequence holds one example as a (length, nb_raw_features) matrix: row i
is the observation vector at position i. Feature kinds never write to it, so
the observations array is flagged read-only once validated.
"""

from typing import Iterator, List, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.utils import check_array

from ..utils.exceptions import DataValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class DataSequence:
    """
    One example: per-position observations, an optional sequence label and
    optional per-position state labels.
    """

    def __init__(
        self,
        observations,
        label: Optional[int] = None,
        state_labels: Optional[Sequence[int]] = None,
    ):
        """
        Args:
            observations: Array-like of shape (length, nb_raw_features).
            label: Sequence label (the overall class of the example), if known.
            state_labels: Per-position labels, if known. Must match the length.
        """
        try:
            obs = check_array(observations, dtype=np.float64, copy=True)
        except ValueError as e:
            raise DataValidationError(f"Invalid observations: {e}") from e
        obs.setflags(write=False)
        self.observations = obs
        self.label = label

        if state_labels is not None:
            state_labels = np.asarray(state_labels, dtype=np.int64)
            if state_labels.shape != (obs.shape[0],):
                raise DataValidationError(
                    f"state_labels has shape {state_labels.shape}, expected ({obs.shape[0]},)"
                )
            state_labels.setflags(write=False)
        self.state_labels = state_labels

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, label: Optional[int] = None,
                   state_column: Optional[str] = None) -> "DataSequence":
        """
        Build a sequence from a DataFrame with one row per position.

        If state_column is given, that column is taken as the per-position state
        labels and every other column is an observation dimension.
        """
        state_labels = None
        if state_column is not None:
            state_labels = frame[state_column].to_numpy()
            frame = frame.drop(columns=[state_column])
        return cls(frame.to_numpy(dtype=np.float64), label=label, state_labels=state_labels)

    @property
    def length(self) -> int:
        return self.observations.shape[0]

    @property
    def nb_raw_features(self) -> int:
        return self.observations.shape[1]

    def __len__(self) -> int:
        return self.length

    def __repr__(self) -> str:
        return f"DataSequence(length={self.length}, nb_raw_features={self.nb_raw_features}, label={self.label})"


class DataSet:
    """Ordered collection of sequences sharing one raw-feature dimension."""

    def __init__(self, sequences: Optional[List[DataSequence]] = None):
        self._sequences: List[DataSequence] = []
        for seq in sequences or []:
            self.add(seq)

    def add(self, sequence: DataSequence) -> None:
        if self._sequences and sequence.nb_raw_features != self.nb_raw_features:
            raise DataValidationError(
                f"Sequence has {sequence.nb_raw_features} raw features, "
                f"data set has {self.nb_raw_features}"
            )
        self._sequences.append(sequence)

    @classmethod
    def from_frames(cls, frames: List[pd.DataFrame], labels: Optional[List[int]] = None) -> "DataSet":
        labels = labels if labels is not None else [None] * len(frames)
        if len(labels) != len(frames):
            raise DataValidationError(f"{len(labels)} labels given for {len(frames)} frames")
        dataset = cls([DataSequence.from_frame(f, label=l) for f, l in zip(frames, labels)])
        logger.debug(f"Built data set of {len(dataset)} sequences")
        return dataset

    @property
    def nb_raw_features(self) -> int:
        """Raw dimension of the first sequence, 0 for an empty set."""
        if not self._sequences:
            return 0
        return self._sequences[0].nb_raw_features

    def __len__(self) -> int:
        return len(self._sequences)

    def __iter__(self) -> Iterator[DataSequence]:
        return iter(self._sequences)

    def __getitem__(self, index: int) -> DataSequence:
        return self._sequences[index]
