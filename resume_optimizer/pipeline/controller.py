# resume_optimizer/pipeline/controller.py
import json
import uuid
import logging
import traceback
import dataclasses
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from resume_optimizer.config import EngineConfig, get_config
from resume_optimizer.models import (
    ResumeDocument, SkillCategory, WorkExperience, Project, Education, Certification
)
from resume_optimizer.normalizer import normalize_resume, normalize_resume_text
from resume_optimizer.errors import ResumeEngineError, ValidationError
from resume_optimizer.ats.jd_extractor import JDExtractor
from resume_optimizer.ats.models import JobRequirementProfile, ScoreReport
from resume_optimizer.ats.scorer import ResumeScorer
from resume_optimizer.ai.rewriter import BulletRewriter
from resume_optimizer.optimizer.convergence import ConvergenceOptimizer
from resume_optimizer.pipeline.steps import (
    PipelineStep, StepStatus, STEP_NAMES, STEP_DESCRIPTIONS, PROGRESS_WEIGHTS,
    USER_INPUT_STEPS, USER_ACTION_DESCRIPTIONS, TOTAL_STEPS, next_step, previous_step
)
from resume_optimizer.pipeline.state import (
    SnapshotHistory, PipelineSnapshot, StepExecution, UserInputRecord, ErrorRecord,
    PipelineState, ProgressIndicator, PipelineStepResult
)
from resume_optimizer.pipeline.validation import (
    validate_step_input, MissingSectionsInput, ProjectModificationsInput
)
from resume_optimizer.pipeline.project_analysis import (
    ProjectAnalyzer, apply_project_modifications, alignment_scores
)
from resume_optimizer.pipeline.bullets import (
    apply_action_context_result, apply_tech_impact_metrics, validate_bullet_formatting
)

logger = logging.getLogger(__name__)

StateListener = Callable[[PipelineState], None]
ProgressListener = Callable[[ProgressIndicator], None]


class PipelineAborted(ResumeEngineError):
    """Session was aborted; no further snapshots are written"""


def identify_missing_sections(resume: ResumeDocument) -> List[str]:
    """Sections the user should be asked to provide"""
    missing = []
    if not resume.work_experience:
        missing.append('work_experience')
    if not resume.projects:
        missing.append('projects')
    if not resume.skills:
        missing.append('skills')
    if not resume.education:
        missing.append('education')
    if not resume.certifications:
        missing.append('certifications')
    if '@' not in resume.contact.email:
        missing.append('contact_email')
    return missing


def export_resume(resume: ResumeDocument) -> Dict[str, Any]:
    """Render the resume in every export format"""
    data = resume.to_dict()
    return {
        'dict': data,
        'json': json.dumps(data, indent=2, ensure_ascii=False),
        'text': resume.to_text(),
    }


class PipelineController:
    """
    Step-based workflow for one optimization session.

    Every mutating step appends an immutable snapshot; history is never
    rewritten. Validation failures return before anything is recorded.
    One instance belongs to one session and is not safe for concurrent
    calls.
    """

    def __init__(
        self,
        job_description: str = "",
        target_role: Optional[str] = None,
        config: Optional[EngineConfig] = None,
        session_id: Optional[str] = None,
        rewriter: Optional[BulletRewriter] = None,
        project_analyzer: Optional[ProjectAnalyzer] = None
    ):
        """
        Initialize a session

        Args:
            job_description: JD text (can also be supplied at step 1 or 2)
            target_role: Explicit target role
            config: Engine configuration (loaded with get_config if None)
            session_id: Identifier for this session
            rewriter: Generative bullet rewriter; deterministic formats are
                used when None or when the provider fails
            project_analyzer: Project suitability analyzer
        """
        self.config = config or get_config()
        self.session_id = session_id or f"pipeline_{uuid.uuid4().hex[:12]}"
        self.job_description = job_description or ""
        self.target_role = target_role
        self.started_at = datetime.now()

        self.extractor = JDExtractor(self.config)
        self.scorer = ResumeScorer(self.config)
        self.rewriter = rewriter
        self.project_analyzer = project_analyzer or ProjectAnalyzer()

        self.current_step = PipelineStep.PARSE_RESUME
        self.snapshots = SnapshotHistory()
        self.step_history: List[StepExecution] = []
        self.user_inputs: List[UserInputRecord] = []
        self.error_log: List[ErrorRecord] = []
        self.parsing_confidence = 1.0

        self._completed = set()
        self._awaiting_input = False
        self._abort_requested = False
        self._profile: Optional[JobRequirementProfile] = None
        self._baseline_report: Optional[ScoreReport] = None
        self._latest_report: Optional[ScoreReport] = None

        self._state_listeners: List[StateListener] = []
        self._progress_listeners: List[ProgressListener] = []

        self._handlers = {
            PipelineStep.PARSE_RESUME: self._parse_resume,
            PipelineStep.ANALYZE_AGAINST_JD: self._analyze_against_jd,
            PipelineStep.MISSING_SECTIONS: self._missing_sections,
            PipelineStep.PROJECT_ANALYSIS: self._project_analysis,
            PipelineStep.RE_ANALYSIS: self._re_analysis,
            PipelineStep.BULLET_REWRITING: self._bullet_rewriting,
            PipelineStep.FINAL_OPTIMIZATION: self._final_optimization,
            PipelineStep.OUTPUT_RESUME: self._output_resume,
        }

    # Public API

    def execute_step(self, step, input: Optional[Any] = None) -> PipelineStepResult:
        """
        Run one step

        Args:
            step: PipelineStep (or its number)
            input: Step input. Omitting it on a user-input step returns an
                analysis with ``user_input_required`` and does not advance.

        Returns:
            PipelineStepResult. Never raises for bad input or step errors.
        """
        try:
            step = PipelineStep(step)
        except ValueError:
            return PipelineStepResult(success=False, error=f"Unknown pipeline step: {step}")

        logger.info(f"Executing pipeline step {int(step)}: {STEP_NAMES[step]}")

        if self._abort_requested:
            return PipelineStepResult(success=False, error="pipeline aborted")

        try:
            payload = validate_step_input(step, input, self._missing_for_validation(step))
        except ValidationError as e:
            logger.warning(f"Step {int(step)} input failed validation: {len(e.errors)} error(s)")
            return PipelineStepResult(
                success=False,
                error="validation failed",
                data={
                    'validation_errors': e.to_list(),
                    'fallback_analysis': self._fallback_analysis(step),
                },
            )

        execution = StepExecution(step=step, status=StepStatus.RUNNING, retry_count=self._retry_count(step))
        self.step_history.append(execution)
        self._notify_state()

        try:
            result = self._handlers[step](payload)
        except Exception as e:
            if isinstance(e, ResumeEngineError):
                logger.error(f"Step {int(step)} failed: {e}")
            else:
                logger.exception(f"Step {int(step)} failed unexpectedly: {e}")
            self._log_error(step, str(e), traceback.format_exc())
            execution.finish(StepStatus.FAILED, str(e))
            self._notify_state()
            return PipelineStepResult(
                success=False,
                error=str(e),
                data={'step': int(step), 'latest_snapshot': self._latest_version()},
            )

        if result.user_input_required:
            execution.finish(StepStatus.PENDING)
            self._awaiting_input = True
        elif result.success:
            execution.finish(StepStatus.COMPLETED)
            self._completed.add(step)
            self._awaiting_input = False
            if result.next_step is not None:
                self.current_step = result.next_step
            logger.info(f"✓ {STEP_NAMES[step]} completed")
        else:
            execution.finish(StepStatus.FAILED, result.error)
            self._log_error(step, result.error or "step failed")

        self._notify_state()
        self._notify_progress()
        return result

    def retry_step(self, step, input: Optional[Any] = None) -> PipelineStepResult:
        """Re-run a failed step, up to ``max_retry_attempts`` failures"""
        step = PipelineStep(step)
        failures = self._retry_count(step)
        if failures >= self.config.max_retry_attempts:
            return PipelineStepResult(
                success=False,
                error=f"Max retries exceeded for step {int(step)} ({failures}/{self.config.max_retry_attempts})",
            )
        logger.info(f"Retrying step {int(step)} (attempt {failures + 1}/{self.config.max_retry_attempts})")
        return self.execute_step(step, input)

    def skip_step(self, step) -> PipelineStepResult:
        """Mark a user-input step as skipped and move past it"""
        step = PipelineStep(step)
        if step not in USER_INPUT_STEPS:
            return PipelineStepResult(success=False, error=f"Step {int(step)} cannot be skipped")
        execution = StepExecution(step=step)
        execution.finish(StepStatus.SKIPPED)
        self.step_history.append(execution)
        self._completed.add(step)
        self._awaiting_input = False
        following = next_step(step)
        if following is not None:
            self.current_step = following
        self._notify_state()
        self._notify_progress()
        return PipelineStepResult(success=True, data={'skipped': int(step)}, next_step=following)

    def proceed_to_next_step(self) -> Optional[PipelineStep]:
        following = next_step(self.current_step)
        if following is not None:
            logger.info(f"Proceeding to next step: {STEP_NAMES[following]}")
            self.current_step = following
            self._notify_state()
            self._notify_progress()
        return following

    def rollback_to_previous_step(self) -> Optional[PipelineStep]:
        """
        Move the step pointer back one step.

        Snapshots, inputs and execution history are kept; the step will
        simply be run again.
        """
        previous = previous_step(self.current_step)
        if previous is not None:
            logger.info(f"Rolling back to previous step: {STEP_NAMES[previous]}")
            self.current_step = previous
            self._completed = {s for s in self._completed if s < previous}
            self._notify_state()
            self._notify_progress()
        return previous

    def record_user_input(self, input_type: str, data: Any) -> UserInputRecord:
        record = UserInputRecord(step=self.current_step, input_type=input_type, data=data)
        self.user_inputs.append(record)
        logger.debug(f"Recorded user input: {input_type} at step {int(self.current_step)}")
        return record

    def abort(self):
        """Stop the session at the next snapshot boundary"""
        logger.warning(f"Abort requested for session {self.session_id}")
        self._abort_requested = True
        self._notify_state()

    @property
    def aborted(self) -> bool:
        return self._abort_requested

    @property
    def latest_snapshot(self) -> Optional[PipelineSnapshot]:
        return self.snapshots.latest

    @property
    def profile(self) -> JobRequirementProfile:
        if self._profile is None:
            self._profile = self.extractor.extract(self.job_description, self.target_role)
        return self._profile

    def on_state_change(self, listener: StateListener):
        self._state_listeners.append(listener)

    def on_progress_change(self, listener: ProgressListener):
        self._progress_listeners.append(listener)

    def get_state(self) -> PipelineState:
        failed = sorted({
            e.step for e in self.step_history
            if e.status == StepStatus.FAILED and e.step not in self._completed
        })
        return PipelineState(
            session_id=self.session_id,
            current_step=self.current_step,
            completed_steps=sorted(self._completed),
            failed_steps=failed,
            user_input_required=self._awaiting_input,
            error_messages=[r.error for r in self.error_log],
            progress_percentage=self._progress_percentage(),
            snapshot_count=len(self.snapshots),
            aborted=self._abort_requested,
            started_at=self.started_at,
        )

    def get_progress(self) -> ProgressIndicator:
        action_required = self._awaiting_input or (
            self.current_step in USER_INPUT_STEPS and self.current_step not in self._completed
        )
        return ProgressIndicator(
            current_step=self.current_step,
            total_steps=TOTAL_STEPS,
            step_name=STEP_NAMES[self.current_step],
            step_description=STEP_DESCRIPTIONS[self.current_step],
            percentage_complete=self._progress_percentage(),
            user_action_required=action_required,
            action_description=USER_ACTION_DESCRIPTIONS.get(self.current_step) if action_required else None,
            estimated_time_remaining=self._estimate_time_remaining(),
        )

    # Step handlers

    def _parse_resume(self, payload) -> PipelineStepResult:
        if payload.job_description is not None:
            self.job_description = payload.job_description
            self._profile = None
        if payload.target_role:
            self.target_role = payload.target_role
            self._profile = None

        warnings = []
        if payload.resume:
            resume = normalize_resume(payload.resume)
            self.parsing_confidence = 1.0
        else:
            parsed = normalize_resume_text(payload.resume_text)
            resume = parsed.resume
            warnings = [w.to_dict() for w in parsed.warnings]
            self.parsing_confidence = parsed.confidence

        issues = []
        if len(resume.contact.name.strip()) < 2:
            issues.append("Name is missing or too short")
        if '@' not in resume.contact.email:
            issues.append("Valid email address is missing")

        self._commit(resume, PipelineStep.PARSE_RESUME, ["Parsed resume"])
        return PipelineStepResult(
            success=True,
            data={
                'updated_resume_data': resume.to_dict(),
                'missing_sections': identify_missing_sections(resume),
                'parsing_confidence': self.parsing_confidence,
                'warnings': warnings,
                'issues': issues,
                'changes': ["Parsed resume"],
            },
            next_step=PipelineStep.ANALYZE_AGAINST_JD,
        )

    def _analyze_against_jd(self, payload) -> PipelineStepResult:
        if payload is not None:
            if payload.job_description is not None:
                self.job_description = payload.job_description
                self._profile = None
            if payload.target_role:
                self.target_role = payload.target_role
                self._profile = None

        resume = self._require_resume()
        profile = self.profile
        report = self.scorer.score(resume, profile)
        if self._baseline_report is None:
            self._baseline_report = report
        self._latest_report = report

        resume_text = resume.full_text().lower()
        missing_keywords = [k.display for k in profile.keywords if k.term not in resume_text]
        critical_issues = [
            f"{p.label}: {p.percentage:.0f}%" for p in report.parameters if p.percentage < 50
        ]
        analysis = {
            'profile': profile.to_dict(),
            'before_score': report.to_dict(),
            'critical_issues': critical_issues,
            'missing_keywords': missing_keywords,
            'recommendations': report.recommendations[:10],
        }
        self.record_user_input('analysis_results', {'overall': report.overall,
                                                    'missing_keywords': missing_keywords})
        return PipelineStepResult(success=True, data=analysis, next_step=PipelineStep.MISSING_SECTIONS)

    def _missing_sections(self, payload: Optional[MissingSectionsInput]) -> PipelineStepResult:
        resume = self._require_resume()
        missing = identify_missing_sections(resume)

        if payload is None:
            required = [s for s in missing if s != 'certifications']
            if not required:
                return PipelineStepResult(
                    success=True,
                    data={'missing_sections': missing, 'changes': []},
                    next_step=PipelineStep.PROJECT_ANALYSIS,
                )
            return PipelineStepResult(
                success=True,
                data={
                    'missing_sections': missing,
                    'required_sections': required,
                    'current_resume_data': resume.to_dict(),
                },
                user_input_required=True,
            )

        updated, changes = self._merge_sections(resume, payload)
        self._commit(updated, PipelineStep.MISSING_SECTIONS, changes)
        self.record_user_input('missing_sections', payload.model_dump())
        return PipelineStepResult(
            success=True,
            data={
                'updated_resume_data': updated.to_dict(),
                'changes': changes,
                'remaining_missing_sections': identify_missing_sections(updated),
            },
            next_step=PipelineStep.PROJECT_ANALYSIS,
        )

    def _project_analysis(self, payload: Optional[ProjectModificationsInput]) -> PipelineStepResult:
        resume = self._require_resume()
        profile = self.profile
        analysis = self.project_analyzer.analyze(resume, profile)

        if payload is None:
            return PipelineStepResult(
                success=True,
                data={
                    'project_analysis': analysis.to_dict(),
                    'alignment_scores': alignment_scores(resume.projects, profile),
                    'current_resume_data': resume.to_dict(),
                },
                user_input_required=True,
            )

        updated, changes = apply_project_modifications(resume, payload)
        scores = alignment_scores(updated.projects, profile)
        self._commit(updated, PipelineStep.PROJECT_ANALYSIS, changes)
        self.record_user_input('project_modifications_applied', {
            'modifications': payload.model_dump(),
            'alignment_scores': scores,
        })
        return PipelineStepResult(
            success=True,
            data={
                'updated_resume_data': updated.to_dict(),
                'changes': changes,
                'alignment_scores': scores,
                'project_analysis': analysis.to_dict(),
            },
            next_step=PipelineStep.RE_ANALYSIS,
        )

    def _re_analysis(self, payload) -> PipelineStepResult:
        resume = self._require_resume()
        previous = self._latest_report or self._baseline_report
        report = self.scorer.score(resume, self.profile)
        if self._baseline_report is None:
            self._baseline_report = report
        self._latest_report = report

        deltas = {}
        if previous is not None:
            for param in report.parameters:
                before = previous.get(param.id)
                deltas[param.id] = round(param.percentage - (before.percentage if before else 0.0), 1)

        return PipelineStepResult(
            success=True,
            data={
                'score': report.to_dict(),
                'previous_overall': previous.overall if previous else None,
                'improvement': round(report.overall - previous.overall, 1) if previous else 0.0,
                'parameter_deltas': deltas,
                'recommendations': report.recommendations[:10],
            },
            next_step=PipelineStep.BULLET_REWRITING,
        )

    def _bullet_rewriting(self, payload) -> PipelineStepResult:
        resume = self._require_resume()
        profile = self.profile
        use_generative = self.rewriter is not None
        if payload is not None and payload.use_generative is not None:
            use_generative = payload.use_generative and self.rewriter is not None

        updated = resume.copy()
        role = self.target_role or profile.role_title
        keywords = [k.display for k in profile.keywords]
        fallback_used = False
        changes = []
        position = 0

        for exp in updated.work_experience:
            new_bullets = None
            if use_generative:
                batch = self.rewriter.rewrite(exp.bullets, role, keywords, style='experience')
                fallback_used = fallback_used or batch.fallback
                if not batch.fallback:
                    new_bullets = batch.bullets
            if new_bullets is None:
                new_bullets = [apply_action_context_result(b, position + j) for j, b in enumerate(exp.bullets)]
            position += len(exp.bullets)
            changes.extend(self._bullet_changes(exp.bullets, new_bullets, f"{exp.role} at {exp.company}"))
            exp.bullets = new_bullets

        for project in updated.projects:
            new_bullets = None
            if use_generative:
                batch = self.rewriter.rewrite(project.bullets, role, keywords, style='projects',
                                              tech_stack=project.tech_stack)
                fallback_used = fallback_used or batch.fallback
                if not batch.fallback:
                    new_bullets = batch.bullets
            if new_bullets is None:
                new_bullets = [apply_tech_impact_metrics(b, project, position + j)
                               for j, b in enumerate(project.bullets)]
            position += len(project.bullets)
            changes.extend(self._bullet_changes(project.bullets, new_bullets, project.title))
            project.bullets = new_bullets

        compliance = validate_bullet_formatting(updated)
        descriptions = [c['description'] for c in changes] or ["Bullets already well formatted"]
        self._commit(updated, PipelineStep.BULLET_REWRITING, descriptions)
        return PipelineStepResult(
            success=True,
            data={
                'updated_resume_data': updated.to_dict(),
                'changes': descriptions,
                'rewritten_bullets': changes,
                'improvement_count': len(changes),
                'compliance': compliance.to_dict(),
                'compliance_score': compliance.compliance_score,
                'format_compliance': compliance.format_compliance,
                'fallback_used': fallback_used,
            },
            next_step=PipelineStep.FINAL_OPTIMIZATION,
        )

    def _final_optimization(self, payload) -> PipelineStepResult:
        resume = self._require_resume()
        profile = self.profile
        config = self.config
        target_role = self.target_role
        if payload is not None:
            if payload.max_iterations:
                config = dataclasses.replace(config, max_iterations=payload.max_iterations)
            if payload.target_role:
                target_role = payload.target_role

        optimizer = ConvergenceOptimizer(config, scorer=self.scorer)
        result = optimizer.optimize(
            resume,
            profile,
            target_role=target_role,
            should_abort=lambda: self._abort_requested,
        )
        if result.aborted:
            raise PipelineAborted("pipeline aborted during optimization; no snapshot written")

        descriptions = [c.description for c in result.changes_applied] or ["No optimization needed"]
        self._commit(result.rewritten_resume, PipelineStep.FINAL_OPTIMIZATION, descriptions)
        self._latest_report = result.after_scores

        keywords_added = sorted(
            set(result.rewritten_resume.skill_set) - set(resume.skill_set)
        )
        return PipelineStepResult(
            success=True,
            data={
                'updated_resume_data': result.rewritten_resume.to_dict(),
                'changes': descriptions,
                'keywords_added': keywords_added,
                'summary_generated': result.rewritten_resume.summary,
                'ats_score': result.overall_after,
                'target_achieved': result.overall_after >= self.config.target_score,
                'warnings': [w.to_dict() for w in result.warnings],
                'optimization': result.to_dict(),
            },
            next_step=PipelineStep.OUTPUT_RESUME,
        )

    def _output_resume(self, payload) -> PipelineStepResult:
        resume = self._require_resume()
        profile = self.profile
        final_report = self.scorer.score(resume, profile)
        baseline = self._baseline_report
        if baseline is None:
            baseline = self.scorer.score(self.snapshots.first.restore(), profile)

        comparison = {
            'before': baseline.overall,
            'after': final_report.overall,
            'improvement': round(final_report.overall - baseline.overall, 1),
            'parameters': [
                {
                    'id': p.id,
                    'label': p.label,
                    'before': baseline.get(p.id).percentage if baseline.get(p.id) else 0.0,
                    'after': p.percentage,
                }
                for p in final_report.parameters
            ],
        }
        formats = payload.formats if payload is not None else ['dict', 'json', 'text']
        exports = {k: v for k, v in export_resume(resume).items() if k in formats}
        actions = [r for p in final_report.failing(self.config.pass_threshold) for r in p.recommendations]

        return PipelineStepResult(
            success=True,
            data={
                'final_resume': resume.to_dict(),
                'final_score': final_report.to_dict(),
                'before_after_comparison': comparison,
                'target_achieved': final_report.overall >= self.config.target_score,
                'user_actions_required': actions,
                'exports': exports,
                'summary': {
                    'session_id': self.session_id,
                    'versions': len(self.snapshots),
                    'steps_completed': len(self._completed | {PipelineStep.OUTPUT_RESUME}),
                },
            },
        )

    # Helpers

    def _require_resume(self) -> ResumeDocument:
        latest = self.snapshots.latest
        if latest is None:
            raise ResumeEngineError("No resume available; run the parse step first")
        return latest.restore()

    def _commit(self, resume: ResumeDocument, step: PipelineStep, changes: List[str]) -> PipelineSnapshot:
        if self._abort_requested:
            raise PipelineAborted("pipeline aborted; no snapshot written")
        snapshot = self.snapshots.append(resume, step, changes)
        logger.debug(f"Saved resume version {snapshot.version} at step {int(step)}")
        return snapshot

    @staticmethod
    def _bullet_changes(before: List[str], after: List[str], where: str) -> List[Dict[str, str]]:
        return [
            {'before': old, 'after': new, 'description': f"Rewrote bullet in {where}"}
            for old, new in zip(before, after) if old != new
        ]

    @staticmethod
    def _merge_sections(resume: ResumeDocument, payload: MissingSectionsInput):
        updated = resume.copy()
        changes = []
        if payload.work_experience:
            updated.work_experience.extend(WorkExperience(**e.model_dump()) for e in payload.work_experience)
            changes.append(f"Added {len(payload.work_experience)} work experience entr(ies)")
        if payload.projects:
            updated.projects.extend(Project(**p.model_dump()) for p in payload.projects)
            changes.append(f"Added {len(payload.projects)} project(s)")
        if payload.skills:
            for category in payload.skills:
                existing = updated.find_category(category.category)
                if existing is None:
                    updated.skills.append(SkillCategory(category.category.strip(), list(category.skills)))
                else:
                    for skill in category.skills:
                        existing.add(skill)
            changes.append(f"Added {len(payload.skills)} skill categor(ies)")
        if payload.education:
            updated.education.extend(Education(**e.model_dump()) for e in payload.education)
            changes.append(f"Added {len(payload.education)} education entr(ies)")
        if payload.certifications:
            updated.certifications.extend(
                Certification(**c.model_dump()) for c in payload.certifications if c.title.strip()
            )
            changes.append(f"Added {len(payload.certifications)} certification(s)")
        if payload.contact_details is not None:
            for key, value in payload.contact_details.model_dump().items():
                if value.strip():
                    setattr(updated.contact, key, value.strip())
            changes.append("Updated contact details")
        return updated, changes

    def _missing_for_validation(self, step: PipelineStep) -> List[str]:
        if step != PipelineStep.MISSING_SECTIONS or self.snapshots.latest is None:
            return []
        return identify_missing_sections(self.snapshots.latest.restore())

    def _fallback_analysis(self, step: PipelineStep) -> Dict[str, Any]:
        """Analysis returned with validation errors so the caller can retry"""
        latest = self.snapshots.latest
        if latest is None:
            return {'step': int(step), 'step_name': STEP_NAMES[step]}
        fallback = {
            'step': int(step),
            'step_name': STEP_NAMES[step],
            'latest_version': latest.version,
            'missing_sections': identify_missing_sections(latest.restore()),
        }
        if self._latest_report is not None:
            fallback['latest_score'] = self._latest_report.overall
        if step == PipelineStep.PROJECT_ANALYSIS:
            fallback['project_analysis'] = self.project_analyzer.analyze(latest.restore(), self.profile).to_dict()
        return fallback

    def _latest_version(self) -> Optional[int]:
        latest = self.snapshots.latest
        return latest.version if latest else None

    def _retry_count(self, step: PipelineStep) -> int:
        return sum(1 for e in self.step_history if e.step == step and e.status == StepStatus.FAILED)

    def _log_error(self, step: PipelineStep, error: str, stack_trace: Optional[str] = None):
        self.error_log.append(ErrorRecord(
            step=step,
            error=error,
            retry_attempt=self._retry_count(step),
            stack_trace=stack_trace,
        ))
        limit = self.config.error_log_limit
        if len(self.error_log) > limit:
            self.error_log = self.error_log[-limit:]

    def _progress_percentage(self) -> int:
        total = sum(PROGRESS_WEIGHTS.values())
        done = 0.0
        for step, weight in PROGRESS_WEIGHTS.items():
            if step in self._completed:
                done += weight
            elif step == self.current_step:
                done += weight * 0.5
        return round(done / total * 100)

    def _estimate_time_remaining(self) -> Optional[int]:
        finished = [e for e in self.step_history if e.status == StepStatus.COMPLETED and e.duration is not None]
        if not finished:
            return None
        average = sum(e.duration for e in finished) / len(finished)
        remaining = TOTAL_STEPS - len(self._completed)
        return round(average * remaining)

    def _notify_state(self):
        if not self._state_listeners:
            return
        state = self.get_state()
        for listener in self._state_listeners:
            try:
                listener(state)
            except Exception as e:
                logger.exception(f"State listener failed: {e}")

    def _notify_progress(self):
        if not self._progress_listeners:
            return
        progress = self.get_progress()
        for listener in self._progress_listeners:
            try:
                listener(progress)
            except Exception as e:
                logger.exception(f"Progress listener failed: {e}")
