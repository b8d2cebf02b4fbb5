from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import ScoreBreakdown, ScoringInputs


class PerformanceScorer(ABC):
    """Scorer interface (Strategy Pattern for composite scoring)."""

    @abstractmethod
    def breakdown(self, inputs: ScoringInputs) -> ScoreBreakdown:
        raise NotImplementedError

    def score(self, inputs: ScoringInputs) -> float:
        return self.breakdown(inputs).final_score
