# resume_optimizer/models.py
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any, Iterator, Tuple
import copy


@dataclass
class ContactInfo:
    """Contact block at the top of the resume"""
    name: str = ""
    email: str = ""
    phone: str = ""
    linkedin: str = ""
    github: str = ""
    location: str = ""

    @property
    def phone_digits(self) -> str:
        return "".join(ch for ch in self.phone if ch.isdigit())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SkillCategory:
    """
    Named group of skills.

    Terms are kept case-insensitively unique; ``count`` is always the
    length of the list.
    """
    category: str
    skills: List[str] = field(default_factory=list)

    def __post_init__(self):
        unique = []
        seen = set()
        for skill in self.skills:
            term = skill.strip()
            if term and term.lower() not in seen:
                seen.add(term.lower())
                unique.append(term)
        self.skills = unique

    @property
    def count(self) -> int:
        return len(self.skills)

    def contains(self, term: str) -> bool:
        return term.strip().lower() in {s.lower() for s in self.skills}

    def add(self, term: str) -> bool:
        """Append a term unless already present. Returns True if added."""
        term = term.strip()
        if not term or self.contains(term):
            return False
        self.skills.append(term)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {'category': self.category, 'count': self.count, 'list': list(self.skills)}


@dataclass
class WorkExperience:
    """Work experience entry"""
    role: str = ""
    company: str = ""
    year: str = ""  # Date range as written, e.g. "Jan 2020 - Present"
    location: str = ""
    bullets: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Project:
    """Project entry"""
    title: str = ""
    description: str = ""
    bullets: List[str] = field(default_factory=list)
    tech_stack: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join([self.title, self.description] + self.bullets + self.tech_stack)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Education:
    """Education entry"""
    degree: str = ""
    school: str = ""
    year: str = ""
    field_of_study: str = ""
    cgpa: str = ""
    location: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Certification:
    title: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ResumeDocument:
    """
    Canonical structured resume.

    Every field is fully defaulted so downstream code never has to
    check for missing sections. Build instances through
    ``resume_optimizer.normalizer.normalize_resume`` when the input
    comes from outside the package.
    """
    contact: ContactInfo = field(default_factory=ContactInfo)
    target_role: str = ""
    summary: str = ""
    skills: List[SkillCategory] = field(default_factory=list)
    work_experience: List[WorkExperience] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    education: List[Education] = field(default_factory=list)
    certifications: List[Certification] = field(default_factory=list)
    achievements: List[str] = field(default_factory=list)

    def copy(self) -> 'ResumeDocument':
        """Deep copy used for copy-on-write updates"""
        return copy.deepcopy(self)

    @property
    def all_skills(self) -> List[str]:
        return [skill for category in self.skills for skill in category.skills]

    @property
    def skill_set(self) -> set:
        return {skill.lower() for skill in self.all_skills}

    def find_category(self, name: str) -> Optional[SkillCategory]:
        for category in self.skills:
            if category.category.lower() == name.lower():
                return category
        return None

    def iter_bullets(self) -> Iterator[Tuple[str, int, int, str]]:
        """
        Yield every bullet with its location.

        Yields:
            (section, entry_index, bullet_index, text) where section is
            'experience' or 'projects'
        """
        for i, exp in enumerate(self.work_experience):
            for j, bullet in enumerate(exp.bullets):
                yield 'experience', i, j, bullet
        for i, project in enumerate(self.projects):
            for j, bullet in enumerate(project.bullets):
                yield 'projects', i, j, bullet

    @property
    def all_bullets(self) -> List[str]:
        return [text for _, _, _, text in self.iter_bullets()]

    def set_bullet(self, section: str, entry_index: int, bullet_index: int, text: str):
        if section == 'experience':
            self.work_experience[entry_index].bullets[bullet_index] = text
        else:
            self.projects[entry_index].bullets[bullet_index] = text

    def full_text(self) -> str:
        """Serialize every field into one searchable string"""
        parts = [
            self.contact.name, self.target_role, self.summary,
        ]
        for category in self.skills:
            parts.append(category.category)
            parts.append(" ".join(category.skills))
        for exp in self.work_experience:
            parts.extend([exp.role, exp.company])
            parts.extend(exp.bullets)
        for project in self.projects:
            parts.append(project.text)
        for edu in self.education:
            parts.extend([edu.degree, edu.school, edu.field_of_study])
        for cert in self.certifications:
            parts.extend([cert.title, cert.description])
        parts.extend(self.achievements)
        return " ".join(p for p in parts if p)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'contact': self.contact.to_dict(),
            'target_role': self.target_role,
            'summary': self.summary,
            'skills': [s.to_dict() for s in self.skills],
            'work_experience': [e.to_dict() for e in self.work_experience],
            'projects': [p.to_dict() for p in self.projects],
            'education': [e.to_dict() for e in self.education],
            'certifications': [c.to_dict() for c in self.certifications],
            'achievements': list(self.achievements),
        }

    def to_text(self) -> str:
        """Plain-text rendering used for export"""
        lines = []
        if self.contact.name:
            lines.append(self.contact.name)
        if self.target_role:
            lines.append(self.target_role)
        contact_line = " | ".join(
            v for v in [self.contact.email, self.contact.phone,
                        self.contact.linkedin, self.contact.github] if v
        )
        if contact_line:
            lines.append(contact_line)
        if self.summary:
            lines.extend(["", "SUMMARY", self.summary])
        if self.skills:
            lines.extend(["", "SKILLS"])
            for category in self.skills:
                lines.append(f"{category.category}: {', '.join(category.skills)}")
        if self.work_experience:
            lines.extend(["", "EXPERIENCE"])
            for exp in self.work_experience:
                lines.append(" | ".join(v for v in [exp.role, exp.company, exp.year] if v))
                lines.extend(f"- {b}" for b in exp.bullets)
        if self.projects:
            lines.extend(["", "PROJECTS"])
            for project in self.projects:
                header = project.title
                if project.tech_stack:
                    header += f" ({', '.join(project.tech_stack)})"
                lines.append(header)
                lines.extend(f"- {b}" for b in project.bullets)
        if self.education:
            lines.extend(["", "EDUCATION"])
            for edu in self.education:
                lines.append(" | ".join(v for v in [edu.degree, edu.school, edu.year] if v))
        if self.certifications:
            lines.extend(["", "CERTIFICATIONS"])
            lines.extend(f"- {c.title}" for c in self.certifications)
        if self.achievements:
            lines.extend(["", "ACHIEVEMENTS"])
            lines.extend(f"- {a}" for a in self.achievements)
        return "\n".join(lines)
