# tests/test_normalizer.py
import pytest

from resume_optimizer.models import ResumeDocument
from resume_optimizer.normalizer import normalize_resume, normalize_resume_text, clean_resume_text


RESUME_TEXT = """Jordan Lee
Platform Engineer
jordan.lee@example.com | +1 555 123 4567 | linkedin.com/in/jordanlee

SUMMARY
Platform engineer with 5 years of experience.

SKILLS
Languages: Python, Go
Cloud: AWS, Docker

EXPERIENCE
Senior Engineer | Acme Corp | Jan 2020 - Present
- Built deployment pipelines for 40 services
- Reduced cloud spend by 20%

PROJECTS
Homelab (Docker, Linux)
- Ran 6 services on a single node

EDUCATION
B.S. Computer Science, State University, 2019
"""


def test_structured_resume(sample_resume):
    assert sample_resume.contact.name == 'Jordan Lee'
    assert sample_resume.contact.phone_digits == '15551234567'
    assert [c.category for c in sample_resume.skills] == ['Programming Languages', 'Cloud & DevOps']
    assert len(sample_resume.work_experience) == 2
    assert sample_resume.projects[0].tech_stack == ['Docker', 'Linux']
    assert sample_resume.certifications[0].title == 'AWS Certified Cloud Practitioner'


def test_camel_case_keys_and_split_dates():
    resume = normalize_resume({
        'personalInfo': {'fullName': 'Ana Ruiz', 'email': 'ana@example.com'},
        'targetRole': 'Backend Engineer',
        'workExperience': [{
            'jobTitle': 'Developer',
            'company': 'Globex',
            'startDate': '2020',
            'endDate': 'Present',
            'bullets': "- Shipped the billing API\n- Cut latency by 30%\n",
        }],
        'projects': [{'name': 'Tracker', 'techStack': 'Flask, Redis', 'highlights': ['Built a tracker']}],
    })
    assert resume.contact.name == 'Ana Ruiz'
    assert resume.target_role == 'Backend Engineer'
    exp = resume.work_experience[0]
    assert (exp.role, exp.company, exp.year) == ('Developer', 'Globex', '2020 - Present')
    assert exp.bullets == ['Shipped the billing API', 'Cut latency by 30%']
    assert resume.projects[0].tech_stack == ['Flask', 'Redis']


def test_flat_skills_are_categorized():
    resume = normalize_resume({'skills': ['python', 'docker', 'Foo', 'PYTHON']})
    by_name = {c.category: c.skills for c in resume.skills}
    assert by_name == {
        'Programming Languages': ['Python'],
        'Cloud & DevOps': ['Docker'],
        'Tools & Platforms': ['Foo'],
    }


def test_skill_mapping_and_count():
    resume = normalize_resume({'skills': {'Languages': 'Python, Go, python'}})
    category = resume.skills[0]
    assert category.skills == ['Python', 'Go']
    assert category.count == 2
    assert category.to_dict() == {'category': 'Languages', 'count': 2, 'list': ['Python', 'Go']}


def test_empty_entries_are_dropped():
    resume = normalize_resume({
        'work_experience': [{}, {'role': 'Analyst', 'bullets': ['', '  ']}],
        'projects': [{'description': 'only a description'}],
        'education': [{'year': '2019'}],
        'certifications': ['', {'name': 'CKA'}],
    })
    assert len(resume.work_experience) == 1
    assert resume.work_experience[0].bullets == []
    assert resume.projects == []
    assert resume.education == []
    assert [c.title for c in resume.certifications] == ['CKA']


def test_none_gives_empty_document():
    resume = normalize_resume(None)
    assert resume == ResumeDocument()
    assert resume.full_text() == ''


def test_document_input_is_copied(sample_resume):
    copy = normalize_resume(sample_resume)
    assert copy == sample_resume
    assert copy is not sample_resume
    copy.skills[0].add('Rust')
    assert not sample_resume.skills[0].contains('Rust')


def test_rejects_non_mapping():
    with pytest.raises(TypeError):
        normalize_resume(['not', 'a', 'resume'])


def test_text_resume_is_segmented():
    result = normalize_resume_text(RESUME_TEXT)
    resume = result.resume

    assert result.is_confident
    assert result.confidence == 1.0
    assert resume.contact.name == 'Jordan Lee'
    assert resume.contact.email == 'jordan.lee@example.com'
    assert resume.contact.phone == '+1 555 123 4567'
    assert resume.contact.linkedin == 'linkedin.com/in/jordanlee'
    assert resume.target_role == 'Platform Engineer'
    assert resume.summary == 'Platform engineer with 5 years of experience.'
    assert [(c.category, c.skills) for c in resume.skills] == [
        ('Languages', ['Python', 'Go']),
        ('Cloud', ['AWS', 'Docker']),
    ]

    exp = resume.work_experience[0]
    assert (exp.role, exp.company, exp.year) == ('Senior Engineer', 'Acme Corp', 'Jan 2020 - Present')
    assert exp.bullets == ['Built deployment pipelines for 40 services', 'Reduced cloud spend by 20%']

    project = resume.projects[0]
    assert (project.title, project.tech_stack) == ('Homelab', ['Docker', 'Linux'])
    assert project.bullets == ['Ran 6 services on a single node']

    edu = resume.education[0]
    assert (edu.degree, edu.school, edu.year) == ('B.S. Computer Science', 'State University', '2019')


def test_text_without_headers_warns():
    result = normalize_resume_text("Jane Doe\njane@example.com\nDid many things over the years")
    assert not result.is_confident
    assert result.confidence == pytest.approx(0.2)
    assert result.warnings[0].section == 'document'
    assert result.resume.contact.email == 'jane@example.com'
    assert result.resume.contact.name == 'Jane Doe'


def test_experience_without_header_lowers_confidence():
    result = normalize_resume_text("Jane Doe\njane@example.com\n\nEXPERIENCE\n- Did a lot of work")
    assert result.confidence == pytest.approx(0.6)
    assert [w.section for w in result.warnings] == ['experience']
    assert result.to_dict()['warnings'][0]['confidence'] == pytest.approx(0.6)


def test_clean_resume_text_fixes_mojibake():
    assert clean_resume_text("CafÃ© \u200bSoftware\ufeff") == "Café Software"
    assert clean_resume_text("") == ""
