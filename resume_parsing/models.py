from __future__ import annotations  # Structured resume profile models

from typing import List

from pydantic import BaseModel, Field


class Project(BaseModel):  # Project entry extracted from a resume
    title: str = ""
    description: str = ""
    techStack: List[str] = Field(default_factory=list)
    duration: str = ""
    role: str = ""


class Internship(BaseModel):  # Internship entry
    company: str = ""
    role: str = ""
    tasks: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    duration: str = ""


class Education(BaseModel):  # Education entry
    degree: str = ""
    institution: str = ""
    years: str = ""
    gpa: str = ""


class Experience(BaseModel):  # Work experience entry
    company: str = ""
    role: str = ""
    duration: str = ""
    responsibilities: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)


class Profile(BaseModel):  # Structured representation of a resume
    skills: List[str] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    internships: List[Internship] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    experience: List[Experience] = Field(default_factory=list)


__all__ = ["Education", "Experience", "Internship", "Profile", "Project"]
