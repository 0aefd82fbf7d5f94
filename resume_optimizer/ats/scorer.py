# resume_optimizer/ats/scorer.py
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from resume_optimizer.models import ResumeDocument
from resume_optimizer.ats.models import JobRequirementProfile, ParameterScore, ScoreReport
from resume_optimizer.ats.parameters import PARAMETERS, ParameterSpec
from resume_optimizer.config import EngineConfig, get_config

logger = logging.getLogger(__name__)


class ResumeScorer:
    """
    Score a resume against a requirement profile on sixteen parameters.

    Scoring never mutates its inputs and never raises for well-typed
    input: absent sections floor the affected parameter. Metrics are
    independent, so they may run on a thread pool when
    ``parallel_scoring`` is enabled; results are always reported in
    parameter-id order.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or get_config()

    def score(self, resume: ResumeDocument, profile: JobRequirementProfile) -> ScoreReport:
        """
        Calculate the score report

        Args:
            resume: Canonical resume document
            profile: Requirement profile from the JD extractor

        Returns:
            ScoreReport with all sixteen parameters
        """
        if self.config.parallel_scoring:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                scores = list(pool.map(lambda spec: self._score_parameter(spec, resume, profile), PARAMETERS))
        else:
            scores = [self._score_parameter(spec, resume, profile) for spec in PARAMETERS]

        scores.sort(key=lambda s: s.id)
        report = ScoreReport(parameters=tuple(scores))

        logger.debug(f"Resume score: {report.overall:.1f}/100 ({report.grade})")
        return report

    def _score_parameter(
        self,
        spec: ParameterSpec,
        resume: ResumeDocument,
        profile: JobRequirementProfile
    ) -> ParameterScore:
        budget = self.config.budget_for(spec.id)
        try:
            points, recommendations = spec.metric(resume, profile)
        except Exception as e:
            # A faulty metric floors its own parameter instead of failing the report
            logger.exception(f"Parameter {spec.id} ({spec.label}) failed: {e}")
            points, recommendations = 0, [f"Could not evaluate {spec.label}; review this section manually"]

        points = max(0.0, min(float(points), float(spec.native_max)))
        # Unrounded so the percentage does not depend on the budget
        scaled = points / spec.native_max * budget if spec.native_max else 0.0

        logger.debug(f"  [{spec.id:>2}] {spec.label}: {scaled:.2f}/{budget}")
        return ParameterScore(
            id=spec.id,
            label=spec.label,
            score=scaled,
            max_score=budget,
            recommendations=tuple(recommendations),
        )


def score_resume(
    resume: ResumeDocument,
    profile: JobRequirementProfile,
    config: Optional[EngineConfig] = None
) -> ScoreReport:
    """Convenience wrapper around ResumeScorer.score"""
    return ResumeScorer(config).score(resume, profile)

