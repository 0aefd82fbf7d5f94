# resume_optimizer/optimizer/convergence.py
import time
import logging
from typing import Optional, Callable, Dict, List

from resume_optimizer.models import ResumeDocument
from resume_optimizer.ats.models import JobRequirementProfile, ScoreReport
from resume_optimizer.ats.scorer import ResumeScorer
from resume_optimizer.ats.taxonomy import finalize_skill_categories
from resume_optimizer.config import EngineConfig, get_config
from resume_optimizer.diagnostics import Diagnostics
from resume_optimizer.errors import ConvergenceIncomplete
from resume_optimizer.optimizer.fixes import FIX_REGISTRY, FixStrategy, FixContext, apply_rank
from resume_optimizer.optimizer.models import FullRewriteResult, RewriteChange

logger = logging.getLogger(__name__)

STAGE = "optimizer"


class ConvergenceOptimizer:
    """
    Apply parameter fixes until every parameter clears the threshold.

    Each iteration works on a private copy. Fixes for the failing
    parameters are tried in apply order (keyword insertion first) and a
    fix is kept only when the re-scored copy does not lower the overall
    score. The copy is committed at the end of the iteration unless
    ``should_abort`` fires first, in which case the whole iteration is
    discarded.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        scorer: Optional[ResumeScorer] = None,
        registry: Optional[Dict[int, FixStrategy]] = None
    ):
        self.config = config or get_config()
        self.scorer = scorer or ResumeScorer(self.config)
        self.registry = registry if registry is not None else FIX_REGISTRY

    def optimize(
        self,
        resume: ResumeDocument,
        profile: JobRequirementProfile,
        initial_report: Optional[ScoreReport] = None,
        target_role: Optional[str] = None,
        should_abort: Optional[Callable[[], bool]] = None
    ) -> FullRewriteResult:
        """
        Run the fix-until-threshold loop

        Args:
            resume: Resume to optimize (not modified)
            profile: Requirement profile
            initial_report: Score of ``resume`` if already computed
            target_role: Explicit role overriding the profile title
            should_abort: Polled between iterations; True stops the run

        Returns:
            FullRewriteResult with the best document reached
        """
        started = time.perf_counter()
        diagnostics = Diagnostics()
        threshold = self.config.pass_threshold
        ctx = FixContext(profile=profile, target_role=target_role)

        working = resume.copy()
        before = initial_report or self.scorer.score(working, profile)
        current = before
        changes: List[RewriteChange] = []
        iterations = 0
        aborted = False

        logger.info(f"Optimizing resume (overall {before.overall:.1f}, threshold {threshold:.0f}%)")
        diagnostics.record(STAGE, "start", overall=before.overall,
                           failing=[p.id for p in before.failing(threshold)])

        for iteration in range(1, self.config.max_iterations + 1):
            failing = current.failing(threshold)
            if not failing:
                diagnostics.record(STAGE, "all parameters pass", iteration=iteration)
                break
            if should_abort and should_abort():
                aborted = True
                diagnostics.record(STAGE, "aborted before iteration", iteration=iteration)
                break

            candidate, candidate_report = working, current
            iteration_changes: List[RewriteChange] = []
            for parameter in sorted(failing, key=lambda p: apply_rank(p.id)):
                strategy = self.registry.get(parameter.id)
                if strategy is None:
                    continue
                try:
                    outcome = strategy.run(candidate, ctx)
                except Exception as e:
                    logger.exception(f"Fix for parameter {parameter.id} failed: {e}")
                    diagnostics.record(STAGE, "fix failed", parameter=parameter.id, error=str(e))
                    continue
                if not outcome.changed:
                    continue

                trial = self.scorer.score(outcome.resume, profile)
                if trial.overall < candidate_report.overall:
                    # Keep the overall score monotonic
                    diagnostics.record(STAGE, f"rejected {strategy.name}", iteration=iteration,
                                       parameter=parameter.id, overall=trial.overall)
                    continue

                candidate, candidate_report = outcome.resume, trial
                iteration_changes.extend(outcome.changes)
                diagnostics.record(STAGE, f"applied {strategy.name}", iteration=iteration,
                                   parameter=parameter.id, changes=len(outcome.changes))

            iterations = iteration
            if not iteration_changes:
                diagnostics.record(STAGE, "no applicable fixes", iteration=iteration)
                break

            if should_abort and should_abort():
                aborted = True
                diagnostics.record(STAGE, "aborted mid-iteration; changes discarded", iteration=iteration)
                break

            working, current = candidate, candidate_report
            changes.extend(iteration_changes)
            logger.info(
                f"  Iteration {iteration}: {len(iteration_changes)} changes, "
                f"overall {current.overall:.1f}"
            )
            diagnostics.record(STAGE, "iteration committed", iteration=iteration,
                               overall=current.overall, changes=len(iteration_changes))

        working, current = self._finalize(working, current, profile, diagnostics)

        warnings = []
        still_failing = current.failing(threshold)
        if still_failing:
            warning = ConvergenceIncomplete(
                [p.id for p in still_failing], [p.label for p in still_failing]
            )
            warnings.append(warning)
            logger.warning(str(warning))

        result = FullRewriteResult(
            rewritten_resume=working,
            before_scores=before,
            after_scores=current,
            changes_applied=changes,
            processing_time=time.perf_counter() - started,
            iterations=iterations,
            warnings=warnings,
            diagnostics=diagnostics,
            aborted=aborted,
        )
        logger.info(
            f"✓ Optimization finished: {result.overall_before:.1f} -> {result.overall_after:.1f} "
            f"({len(changes)} changes, {iterations} iteration(s))"
        )
        return result

    def _finalize(self, resume: ResumeDocument, report: ScoreReport, profile, diagnostics: Diagnostics):
        finalized = finalize_skill_categories(resume.skills)
        if [c.to_dict() for c in finalized] == [c.to_dict() for c in resume.skills]:
            return resume, report

        candidate = resume.copy()
        candidate.skills = finalized
        candidate_report = self.scorer.score(candidate, profile)
        if candidate_report.overall < report.overall:
            return resume, report
        diagnostics.record(STAGE, "finalized skill categories", categories=len(finalized))
        return candidate, candidate_report


def optimize_resume(
    resume: ResumeDocument,
    profile: JobRequirementProfile,
    config: Optional[EngineConfig] = None,
    target_role: Optional[str] = None
) -> FullRewriteResult:
    """Convenience wrapper around ConvergenceOptimizer.optimize"""
    return ConvergenceOptimizer(config).optimize(resume, profile, target_role=target_role)
