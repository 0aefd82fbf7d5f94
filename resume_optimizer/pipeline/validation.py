# resume_optimizer/pipeline/validation.py
"""
Step input schemas and validation rules.

Schemas (pydantic) check shape and types; the rule functions check the
content requirements and report every failing field with a remedy.
"""
import re
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator
from pydantic import ValidationError as SchemaError
from pydantic.alias_generators import to_camel

from resume_optimizer.errors import FieldError, ValidationError
from resume_optimizer.pipeline.steps import PipelineStep

MIN_BULLET_CHARS = 10

# Sections the user must supply when missing (certifications may be skipped)
REQUIRED_SECTIONS = ('work_experience', 'projects', 'skills', 'education', 'contact_email')


def _split_lines(value: Any) -> Any:
    if isinstance(value, str):
        return [line.strip() for line in value.splitlines() if line.strip()]
    return value


def _split_commas(value: Any) -> Any:
    if isinstance(value, str):
        return [v.strip() for v in value.split(',') if v.strip()]
    return value


class StepInput(BaseModel):
    """Base schema: accepts snake_case or camelCase keys, ignores unknown keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')


class ContactInput(StepInput):
    name: str = ""
    email: str = ""
    phone: str = ""
    linkedin: str = ""
    github: str = ""
    location: str = ""


class ExperienceInput(StepInput):
    role: str = ""
    company: str = ""
    year: str = ""
    location: str = ""
    bullets: List[str] = Field(default_factory=list)

    @field_validator('bullets', mode='before')
    @classmethod
    def split_bullets(cls, value):
        return _split_lines(value)


class ProjectInput(StepInput):
    title: str = ""
    description: str = ""
    bullets: List[str] = Field(default_factory=list)
    tech_stack: List[str] = Field(default_factory=list)

    @field_validator('bullets', mode='before')
    @classmethod
    def split_bullets(cls, value):
        return _split_lines(value)

    @field_validator('tech_stack', mode='before')
    @classmethod
    def split_tech(cls, value):
        return _split_commas(value)


class ReplacedProjectInput(ProjectInput):
    original_title: str = ""


class SkillCategoryInput(StepInput):
    category: str = ""
    skills: List[str] = Field(default_factory=list, validation_alias=AliasChoices('list', 'skills'))

    @field_validator('skills', mode='before')
    @classmethod
    def split_skills(cls, value):
        return _split_commas(value)


class EducationInput(StepInput):
    degree: str = ""
    school: str = ""
    year: str = ""
    field_of_study: str = ""
    cgpa: str = ""
    location: str = ""


class CertificationInput(StepInput):
    title: str = ""
    description: str = ""


class ParseResumeInput(StepInput):
    resume: Optional[Dict[str, Any]] = None
    resume_text: Optional[str] = None
    job_description: Optional[str] = None
    target_role: Optional[str] = None


class AnalyzeInput(StepInput):
    job_description: Optional[str] = None
    target_role: Optional[str] = None


class MissingSectionsInput(StepInput):
    work_experience: Optional[List[ExperienceInput]] = None
    projects: Optional[List[ProjectInput]] = None
    skills: Optional[List[SkillCategoryInput]] = None
    education: Optional[List[EducationInput]] = None
    certifications: Optional[List[CertificationInput]] = None
    contact_details: Optional[ContactInput] = None
    skipped_sections: List[str] = Field(default_factory=list)

    @field_validator('certifications', mode='before')
    @classmethod
    def plain_certifications(cls, value):
        if isinstance(value, list):
            return [{'title': v} if isinstance(v, str) else v for v in value]
        return value


class ProjectModificationsInput(StepInput):
    removed_project_titles: List[str] = Field(default_factory=list)
    added_projects: List[ProjectInput] = Field(default_factory=list)
    replaced_projects: List[ReplacedProjectInput] = Field(default_factory=list)
    modified_projects: List[ProjectInput] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.removed_project_titles or self.added_projects
                    or self.replaced_projects or self.modified_projects)


class ReAnalysisInput(StepInput):
    pass


class BulletRewritingInput(StepInput):
    use_generative: Optional[bool] = None


class FinalOptimizationInput(StepInput):
    max_iterations: Optional[int] = Field(default=None, ge=1, le=10)
    target_role: Optional[str] = None


class OutputInput(StepInput):
    formats: List[Literal['dict', 'json', 'text']] = Field(
        default_factory=lambda: ['dict', 'json', 'text']
    )


STEP_SCHEMAS = {
    PipelineStep.PARSE_RESUME: ParseResumeInput,
    PipelineStep.ANALYZE_AGAINST_JD: AnalyzeInput,
    PipelineStep.MISSING_SECTIONS: MissingSectionsInput,
    PipelineStep.PROJECT_ANALYSIS: ProjectModificationsInput,
    PipelineStep.RE_ANALYSIS: ReAnalysisInput,
    PipelineStep.BULLET_REWRITING: BulletRewritingInput,
    PipelineStep.FINAL_OPTIMIZATION: FinalOptimizationInput,
    PipelineStep.OUTPUT_RESUME: OutputInput,
}

# Steps that cannot run without input
REQUIRED_INPUT_STEPS = frozenset([PipelineStep.PARSE_RESUME])


# Content rules

def _too_short(value: str, minimum: int) -> bool:
    return len((value or "").strip()) < minimum


def check_experience(entries: Sequence[ExperienceInput], prefix: str = 'work_experience') -> List[FieldError]:
    errors = []
    for i, exp in enumerate(entries):
        if _too_short(exp.role, 2):
            errors.append(FieldError(f"{prefix}[{i}].role", "Job title is required (minimum 2 characters)",
                                     "Enter the job title held"))
        if _too_short(exp.company, 2):
            errors.append(FieldError(f"{prefix}[{i}].company", "Company name is required (minimum 2 characters)",
                                     "Enter the employer name"))
        if _too_short(exp.year, 4):
            errors.append(FieldError(f"{prefix}[{i}].year", "Duration is required (minimum 4 characters)",
                                     "Enter a date range such as 'Jan 2020 - Present'"))
    return errors


def check_projects(projects: Sequence[ProjectInput], prefix: str = 'projects') -> List[FieldError]:
    errors = []
    for i, project in enumerate(projects):
        if _too_short(project.title, 3):
            errors.append(FieldError(f"{prefix}[{i}].title", "Title is required (minimum 3 characters)",
                                     "Give the project a descriptive title"))
        if not any(len(b.strip()) >= MIN_BULLET_CHARS for b in project.bullets):
            errors.append(FieldError(
                f"{prefix}[{i}].bullets",
                f"At least one detailed bullet is required (minimum {MIN_BULLET_CHARS} characters)",
                "Describe what was built and its impact in one or more bullets"
            ))
    return errors


def check_skills(categories: Sequence[SkillCategoryInput]) -> List[FieldError]:
    errors = []
    for i, category in enumerate(categories):
        if _too_short(category.category, 2):
            errors.append(FieldError(f"skills[{i}].category", "Category name is required (minimum 2 characters)",
                                     "Name the group, e.g. 'Programming Languages'"))
        if not any(len(s.strip()) >= 2 for s in category.skills):
            errors.append(FieldError(f"skills[{i}].list", "At least one skill is required (minimum 2 characters)",
                                     "List the skills in this category"))
    return errors


def check_education(entries: Sequence[EducationInput]) -> List[FieldError]:
    errors = []
    for i, edu in enumerate(entries):
        if _too_short(edu.degree, 2):
            errors.append(FieldError(f"education[{i}].degree", "Degree is required (minimum 2 characters)",
                                     "Enter the degree, e.g. 'B.S. Computer Science'"))
        if _too_short(edu.school, 2):
            errors.append(FieldError(f"education[{i}].school", "Institution name is required (minimum 2 characters)",
                                     "Enter the school or university"))
        if _too_short(edu.year, 4):
            errors.append(FieldError(f"education[{i}].year", "Year is required (minimum 4 characters)",
                                     "Enter the graduation year"))
    return errors


def check_contact(contact: ContactInput) -> List[FieldError]:
    errors = []
    if '@' not in contact.email:
        errors.append(FieldError("contact_details.email", "Valid email address is required",
                                 "Enter an address such as name@example.com"))
    if contact.phone.strip() and len(re.sub(r'\D', '', contact.phone)) < 10:
        errors.append(FieldError("contact_details.phone", "Phone number must have at least 10 digits if provided",
                                 "Include the area code"))
    return errors


def _check_parse(model: ParseResumeInput, missing: Sequence[str]) -> List[FieldError]:
    if model.resume or (model.resume_text and model.resume_text.strip()):
        return []
    return [FieldError("resume", "Resume data or resume text is required",
                       "Pass a structured 'resume' object or the plain 'resume_text'")]


def _check_missing_sections(model: MissingSectionsInput, missing: Sequence[str]) -> List[FieldError]:
    errors = []
    skipped = {s.strip() for s in model.skipped_sections}
    provided = {
        'work_experience': model.work_experience,
        'projects': model.projects,
        'skills': model.skills,
        'education': model.education,
        'contact_email': model.contact_details,
    }
    for section in missing:
        if section in REQUIRED_SECTIONS and section not in skipped and not provided.get(section):
            errors.append(FieldError(section, "Section is required and cannot be empty",
                                     f"Provide at least one {section.replace('_', ' ')} entry or skip the section"))

    if model.work_experience:
        errors.extend(check_experience(model.work_experience))
    if model.projects:
        errors.extend(check_projects(model.projects))
    if model.skills:
        errors.extend(check_skills(model.skills))
    if model.education:
        errors.extend(check_education(model.education))
    if model.contact_details is not None:
        errors.extend(check_contact(model.contact_details))
    return errors


def _check_project_modifications(model: ProjectModificationsInput, missing: Sequence[str]) -> List[FieldError]:
    errors = []
    errors.extend(check_projects(model.added_projects, 'added_projects'))
    errors.extend(check_projects(model.replaced_projects, 'replaced_projects'))
    errors.extend(check_projects(model.modified_projects, 'modified_projects'))
    for i, project in enumerate(model.replaced_projects):
        if not project.original_title.strip():
            errors.append(FieldError(f"replaced_projects[{i}].original_title",
                                     "Original title is required for a replacement",
                                     "Name the project being replaced"))
    return errors


def _no_rules(model: StepInput, missing: Sequence[str]) -> List[FieldError]:
    return []


STEP_RULES: Dict[PipelineStep, Callable[[Any, Sequence[str]], List[FieldError]]] = {
    PipelineStep.PARSE_RESUME: _check_parse,
    PipelineStep.MISSING_SECTIONS: _check_missing_sections,
    PipelineStep.PROJECT_ANALYSIS: _check_project_modifications,
}


def _schema_errors(error: SchemaError) -> List[FieldError]:
    errors = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get('loc', ())) or 'input'
        errors.append(FieldError(location, item.get('msg', 'Invalid value'),
                                 "Provide a value of the expected type"))
    return errors


def validate_step_input(
    step: PipelineStep,
    data: Any,
    missing_sections: Sequence[str] = ()
) -> Optional[StepInput]:
    """
    Validate raw input for a step

    Args:
        step: Step the input is meant for
        data: Raw input (dict or an already-built schema instance)
        missing_sections: Sections currently missing from the resume
            (used by the missing-sections step)

    Returns:
        Parsed schema instance, or None when no input was given for a
        step that accepts none

    Raises:
        ValidationError: with one FieldError per failing field
    """
    schema = STEP_SCHEMAS[step]

    if data is None:
        if step in REQUIRED_INPUT_STEPS:
            raise ValidationError([FieldError('input', 'Input is required for this step',
                                              'Provide the step input')])
        return None

    if isinstance(data, schema):
        model = data
    elif isinstance(data, dict):
        if step == PipelineStep.PROJECT_ANALYSIS:
            data = data.get('project_modifications') or data.get('projectModifications') or data
        try:
            model = schema.model_validate(data)
        except SchemaError as e:
            raise ValidationError(_schema_errors(e)) from e
    else:
        raise ValidationError([FieldError('input', 'Step input must be an object',
                                          'Pass a mapping of field names to values')])

    errors = STEP_RULES.get(step, _no_rules)(model, missing_sections)
    if errors:
        raise ValidationError(errors)
    return model
