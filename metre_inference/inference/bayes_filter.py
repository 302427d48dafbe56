"""Bayesian filtering of interpretation beliefs over a test sequence.

A pure marginal filter: each interpretation's belief starts at its prior and
is reweighted by the likelihood its model gives to each observed event, then
all beliefs are renormalized jointly. There is no transition model between
interpretations.

For every position t:

    evidence(t)   = sum_k L(k, t) * belief(k)
    belief'(k)    = L(k, t) * belief(k) / evidence(t)
    IC(t)         = -log2(evidence(t))

IC(t) is the surprisal of event t under the pre-update belief mixture.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence as SequenceType

import numpy as np

from ..core import Distribution, InferenceError, ZeroEvidenceError, category_key_of
from .ensemble import check_keys


@dataclass
class FilterResult:
    """Container for filtering results."""

    prior: Distribution
    posterior: Distribution  # Time-varying, one value per position and key
    evidence: List[float] = field(default_factory=list)
    information_content: List[float] = field(default_factory=list)

    @property
    def n_positions(self) -> int:
        return len(self.information_content)

    @property
    def mean_information_content(self) -> Optional[float]:
        """Mean surprisal per event (None for an empty sequence)."""
        if not self.information_content:
            return None
        return float(np.mean(self.information_content))

    def final_posterior(self) -> Distribution:
        """Posterior after the last event (the prior if there are no events)."""
        if self.n_positions == 0:
            return self.prior
        return self.posterior.slice(-1)


class BayesianFilter:
    """Sequential Bayesian update of a prior by per-key likelihood series."""

    def run(
        self,
        prior: Distribution,
        likelihoods: Dict[str, SequenceType[float]],
    ) -> FilterResult:
        """
        Filter a prior through likelihood series.

        Args:
            prior: Static prior over interpretation keys
            likelihoods: Interpretation key -> one likelihood per position

        Returns:
            FilterResult with the posterior series, evidence and information content

        Raises:
            KeyMismatchError: prior and likelihoods have different keys
            ZeroEvidenceError: an event has zero probability under every hypothesis
        """
        if prior.is_time_varying:
            raise InferenceError("Prior must be a static distribution")
        check_keys(prior, likelihoods)

        keys, belief = prior.as_matrix()
        lengths = {len(likelihoods[key]) for key in keys}
        if len(lengths) > 1:
            raise InferenceError(f"Likelihood series have different lengths: {sorted(lengths)}")
        n_positions = lengths.pop() if lengths else 0

        matrix = np.array([likelihoods[key] for key in keys], dtype=np.float64).reshape(
            len(keys), n_positions
        )
        self._validate(keys, matrix)

        posterior = np.zeros_like(matrix)
        evidence_series: List[float] = []
        information_content: List[float] = []

        for t in range(n_positions):
            weighted = matrix[:, t] * belief
            evidence = float(np.sum(weighted))
            if not (evidence > 0 and math.isfinite(evidence)):
                raise ZeroEvidenceError(position=t, evidence=evidence)

            belief = weighted / evidence
            posterior[:, t] = belief
            evidence_series.append(evidence)
            information_content.append(-math.log2(evidence))

        return FilterResult(
            prior=prior,
            posterior=Distribution.from_matrix(keys, posterior),
            evidence=evidence_series,
            information_content=information_content,
        )

    @staticmethod
    def _validate(keys: List[str], matrix: np.ndarray) -> None:
        """Likelihoods must be finite and non-negative."""
        bad = ~np.isfinite(matrix) | (matrix < 0)
        if np.any(bad):
            row, t = map(int, np.argwhere(bad)[0])
            raise InferenceError(
                f"Invalid likelihood {matrix[row, t]!r} for {keys[row]!r}",
                category=category_key_of(keys[row]),
                position=t,
            )
