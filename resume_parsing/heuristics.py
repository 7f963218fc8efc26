"""Keyword and regex heuristics deriving a Profile when no model is available.

The rules are deliberately low precision. ``extract_profile_fallback`` is a
pure function of its input text: it performs no I/O and never raises, and it
always returns a valid :class:`Profile`, filled in wherever a rule matched.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .models import Education, Experience, Internship, Profile, Project

MAX_LABELED_SKILLS = 15
MAX_SCANNED_SKILLS = 10
MAX_PROJECTS = 3
MAX_PROJECT_TECH = 5
MAX_EXPERIENCE = 3
MAX_INTERNSHIPS = 2
MAX_EDUCATION = 2
SHORT_DESCRIPTION_CHARS = 50

TECH_VOCABULARY = (
    "Python", "Java", "JavaScript", "TypeScript", "C++", "C#", "Golang", "Rust",
    "Ruby", "PHP", "Swift", "Kotlin", "Scala", "SQL", "HTML", "CSS",
    "React", "Angular", "Vue", "Next.js", "Node.js", "Django", "Flask", "FastAPI",
    "Spring", "MongoDB", "PostgreSQL", "MySQL", "Redis", "GraphQL",
    "Docker", "Kubernetes", "AWS", "Azure", "GCP", "Git", "Linux", "Terraform",
    "TensorFlow", "PyTorch", "Pandas", "NumPy", "Kafka", "Spark",
)

_CANONICAL_TECH = {name.lower(): name for name in TECH_VOCABULARY}
_TECH_RE = re.compile(
    r"(?<![\w+#.])("
    + "|".join(re.escape(name) for name in sorted(TECH_VOCABULARY, key=len, reverse=True))
    + r")(?![\w+#])",
    re.IGNORECASE,
)

_CHUNK_SPLIT_RE = re.compile(r"[\n\t]+| {2,}")
_SKILL_LABEL_RE = re.compile(
    r"\s*(?:technical\s+|core\s+)?(?:skills|technologies|tech stack|programming languages|tools)\s*[:\-–—]\s*(.*)",
    re.IGNORECASE,
)
_NEXT_SECTION_RE = re.compile(
    r"\b(?:experience|work history|employment|education|projects?|internships?|"
    r"certifications?|achievements|summary|objective)\b\s*[:\-–—]",
    re.IGNORECASE,
)
_HEADER_ONLY_RE = re.compile(
    r"(?:technical\s+)?(?:skills|experience|work experience|education|projects?|internships?|"
    r"portfolio|certifications?|summary)\s*[:\-–—]?",
    re.IGNORECASE,
)
_SKILL_SPLIT_RE = re.compile(r"[,;|•·●▪]|\s+/\s+")

_PROJECT_RE = re.compile(r"\b(?:project|portfolio|application|app|website|system)s?\b", re.IGNORECASE)
_TITLE_SPLIT_RE = re.compile(r"\s[-–—|]\s|:\s")

_ROLE_RE = re.compile(
    r"\b(?:engineer|developer|intern|analyst|manager|consultant|designer|architect|"
    r"scientist|specialist|administrator|programmer)s?\b",
    re.IGNORECASE,
)
_ORG_RE = re.compile(
    r"\b(?:inc|llc|ltd|corp|corporation|gmbh|technologies|solutions|labs)\b\.?",
    re.IGNORECASE,
)
_ROLE_CAPTURE_RE = re.compile(
    r"((?:(?:senior|junior|lead|staff|principal|associate|software|backend|frontend|"
    r"full[- ]stack|data|ml|devops|cloud|mobile|web|qa|research)\s+)*"
    r"(?:engineer|developer|intern|analyst|manager|consultant|designer|architect|"
    r"scientist|specialist|administrator|programmer)s?)\b",
    re.IGNORECASE,
)
_COMPANY_AT_RE = re.compile(r"(?:\bat|@)\s+([A-Z][\w&.'-]*(?:\s+[A-Z][\w&.'-]*)*)")
_COMPANY_SUFFIX_RE = re.compile(
    r"([A-Z][\w&'-]*(?:\s+[A-Z][\w&'-]*)*\s+"
    r"(?:Inc|LLC|Ltd|Corp|Corporation|GmbH|Technologies|Solutions|Labs)\.?)"
)
_DATE_RANGE_RE = re.compile(
    r"((?:[A-Z][a-z]{2,8}\.?\s+)?\d{4}\s*(?:-|–|—|to)\s*"
    r"(?:(?:[A-Z][a-z]{2,8}\.?\s+)?\d{4}|present|current|now))",
    re.IGNORECASE,
)
_INTERNSHIP_RE = re.compile(r"\bintern(?:ship)?s?\b", re.IGNORECASE)

_DEGREE_RE = re.compile(
    r"\b(?:bachelor(?:'s)?|master(?:'s)?|b\.?tech|m\.?tech|b\.?sc|m\.?sc|ph\.?d|mba|diploma|degree)\b",
    re.IGNORECASE,
)
_INSTITUTION_RE = re.compile(r"\b(?:university|college|institute|school|academy)\b", re.IGNORECASE)
_DEGREE_CAPTURE_RE = re.compile(
    r"((?:bachelor(?:'s)?|master(?:'s)?|b\.?tech|m\.?tech|b\.?sc|m\.?sc|ph\.?d|mba|diploma)"
    r"(?:\s+(?:of|in)\s+\w+(?:\s+(?!(?:of|in)\b)\w+)?)?)",
    re.IGNORECASE,
)
_INSTITUTION_CAPTURE_RE = re.compile(
    r"((?:[A-Z][\w&.'-]*\s+){0,4}(?:University|College|Institute|School|Academy)"
    r"(?:\s+of\s+[A-Z][\w&'-]*(?:\s+[A-Z][\w&'-]*){0,3})?)"
)

DEFAULT_COMPANY = "Company"
DEFAULT_ROLE = "Professional Role"
DEFAULT_INTERN_ROLE = "Intern"
DEFAULT_PROJECT_ROLE = "Developer"
DEFAULT_DURATION = "Not specified"
DEFAULT_DEGREE = "Bachelor's Degree"
DEFAULT_INSTITUTION = "University"
PLACEHOLDER_YEARS = "N/A"
PLACEHOLDER_GPA = "N/A"


def extract_profile_fallback(text: str) -> Profile:
    """Derive a best-effort Profile from normalized resume text."""

    source = text or ""
    chunks = split_chunks(source)
    content = [chunk for chunk in chunks if not _is_header(chunk) and not _SKILL_LABEL_RE.match(chunk)]
    return Profile(
        skills=extract_skills(source, chunks),
        projects=[_project(chunk) for chunk in _select(content, _PROJECT_RE, MAX_PROJECTS)],
        internships=[_internship(chunk) for chunk in _select(content, _INTERNSHIP_RE, MAX_INTERNSHIPS)],
        education=[_education(chunk) for chunk in _select_any(content, (_DEGREE_RE, _INSTITUTION_RE), MAX_EDUCATION)],
        experience=[_experience(chunk) for chunk in _select_any(content, (_ROLE_RE, _ORG_RE), MAX_EXPERIENCE)],
    )


def split_chunks(text: str) -> List[str]:
    """Split text into trimmed, non-empty line-like chunks."""

    return [part.strip() for part in _CHUNK_SPLIT_RE.split(text) if part and part.strip()]


def extract_skills(text: str, chunks: Optional[List[str]] = None) -> List[str]:
    """Skills from labelled lines, else from a vocabulary scan of the whole text."""

    chunks = split_chunks(text) if chunks is None else chunks
    labeled: List[str] = []
    for index, chunk in enumerate(chunks):
        match = _SKILL_LABEL_RE.match(chunk)
        if not match:
            continue
        value = match.group(1).strip()
        if not value and index + 1 < len(chunks):
            value = chunks[index + 1]
        cut = _NEXT_SECTION_RE.search(value)
        if cut:
            value = value[: cut.start()]
        labeled.extend(_split_skill_list(value))
    labeled = _unique(labeled)
    if labeled:
        return labeled[:MAX_LABELED_SKILLS]
    return tech_mentions(text, MAX_SCANNED_SKILLS)


def tech_mentions(text: str, limit: int) -> List[str]:
    """Known technology names mentioned in ``text``, in order of appearance."""

    found = [_CANONICAL_TECH[match.group(1).lower()] for match in _TECH_RE.finditer(text)]
    return _unique(found)[:limit]


def _split_skill_list(value: str) -> List[str]:
    items: List[str] = []
    for raw in _SKILL_SPLIT_RE.split(value):
        item = raw.strip(" .-*\t")
        if item and len(item) <= 40:
            items.append(item)
    return items


def _unique(items: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    result: List[str] = []
    for item in items:
        key = item.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(item)
    return result


def _is_header(chunk: str) -> bool:
    return _HEADER_ONLY_RE.fullmatch(chunk) is not None


def _select(chunks: List[str], pattern: re.Pattern[str], limit: int) -> List[str]:
    return [chunk for chunk in chunks if pattern.search(chunk)][:limit]


def _select_any(chunks: List[str], patterns: Iterable[re.Pattern[str]], limit: int) -> List[str]:
    compiled = tuple(patterns)
    return [chunk for chunk in chunks if any(p.search(chunk) for p in compiled)][:limit]


def _first_group(pattern: re.Pattern[str], chunk: str, default: str) -> str:
    match = pattern.search(chunk)
    if not match:
        return default
    value = match.group(1).strip(" ,.-|")
    return value or default


def _company(chunk: str) -> str:
    company = _first_group(_COMPANY_AT_RE, chunk, "")
    return company or _first_group(_COMPANY_SUFFIX_RE, chunk, DEFAULT_COMPANY)


def _project(chunk: str) -> Project:
    title = _TITLE_SPLIT_RE.split(chunk, maxsplit=1)[0].strip()[:80] or chunk[:80]
    if len(chunk) < SHORT_DESCRIPTION_CHARS:
        description = f"{chunk} - A technical project"
    else:
        description = chunk
    return Project(
        title=title,
        description=description,
        techStack=tech_mentions(chunk, MAX_PROJECT_TECH),
        duration=_first_group(_DATE_RANGE_RE, chunk, DEFAULT_DURATION),
        role=DEFAULT_PROJECT_ROLE,
    )


def _experience(chunk: str) -> Experience:
    return Experience(
        company=_company(chunk),
        role=_first_group(_ROLE_CAPTURE_RE, chunk, DEFAULT_ROLE),
        duration=_first_group(_DATE_RANGE_RE, chunk, DEFAULT_DURATION),
        responsibilities=[chunk],
        technologies=tech_mentions(chunk, MAX_PROJECT_TECH),
    )


def _internship(chunk: str) -> Internship:
    return Internship(
        company=_company(chunk),
        role=_first_group(_ROLE_CAPTURE_RE, chunk, DEFAULT_INTERN_ROLE),
        tasks=[chunk],
        technologies=tech_mentions(chunk, MAX_PROJECT_TECH),
        duration=_first_group(_DATE_RANGE_RE, chunk, DEFAULT_DURATION),
    )


def _education(chunk: str) -> Education:
    return Education(
        degree=_first_group(_DEGREE_CAPTURE_RE, chunk, DEFAULT_DEGREE),
        institution=_first_group(_INSTITUTION_CAPTURE_RE, chunk, DEFAULT_INSTITUTION),
        years=PLACEHOLDER_YEARS,
        gpa=PLACEHOLDER_GPA,
    )


__all__ = ["extract_profile_fallback", "extract_skills", "split_chunks", "tech_mentions"]
