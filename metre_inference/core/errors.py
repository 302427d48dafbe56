"""Exceptions and warnings raised by the inference engine."""

from typing import Iterable, List, Optional


class InferenceError(Exception):
    """Fatal error in an inference run.

    Carries the offending category and position, when known, so that the
    failure can be traced back to the corpus or test sequence.
    """

    def __init__(
        self,
        message: str,
        category: Optional[str] = None,
        position: Optional[int] = None,
    ):
        self.category = category
        self.position = position
        context = []
        if category is not None:
            context.append(f"category={category}")
        if position is not None:
            context.append(f"position={position}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class ZeroEvidenceError(InferenceError):
    """Every hypothesis assigned zero likelihood to an observed event."""

    def __init__(self, position: int, evidence: float = 0.0):
        self.evidence = evidence
        super().__init__(
            f"Evidence is {evidence!r}: no interpretation can explain the event",
            position=position,
        )


class KeyMismatchError(InferenceError):
    """Prior and likelihoods disagree on the interpretation key set."""

    def __init__(self, missing: Iterable[str], extra: Iterable[str]):
        self.missing: List[str] = sorted(missing)
        self.extra: List[str] = sorted(extra)
        super().__init__(
            "Prior and likelihood keys differ: "
            f"missing likelihoods for {self.missing}, no prior for {self.extra}"
        )


class PriorError(InferenceError):
    """A prior could not be constructed."""


class MissingAttributeWarning(UserWarning):
    """An event lacked an attribute required for counting or segmentation."""


class CacheCorruptionWarning(UserWarning):
    """A cached value failed validation and will be recomputed."""
