"""Pytest configuration and shared fixtures."""

import pytest

from src.analysis.models import JobDescriptionAnalysis

MASTER_ROWS = [
    ["PERSONAL INFO"],
    ["Full Name", "Ada Lovelace"],
    ["Email", "ada@example.com"],
    ["Phone", "555-0100"],
    ["Location", "London, UK"],
    ["LinkedIn", "linkedin.com/in/ada"],
    ["GitHub", "https://github.com/ada"],
    [],
    ["SUMMARY"],
    ["", "Analyst with a taste for engines."],
    [],
    ["EDUCATION"],
    ["Institution", "Degree", "FieldOfStudy", "StartDate", "EndDate", "GPA"],
    ["University of London", "BSc", "Mathematics", "2010", "2014", "3.9"],
    [],
    ["EXPERIENCE"],
    ["Company", "JobTitle", "Location", "StartDate", "EndDate", "Responsibility1", "Responsibility2", "Responsibility3"],
    ["Acme Corp", "Engineer", "NYC", "2020", "2022", "Built X", "Led Y", ""],
    ["Globex", "Analyst", "Boston", "2018", "2020", "Modeled demand with Python", "", "Wrote reports"],
    [],
    ["PROJECTS"],
    ["ProjectName", "Technologies", "DescriptionBullet1", "DescriptionBullet2"],
    ["Engine Sim", "Python\\nNumPy", "Simulated the analytical engine", "Published results"],
    [],
    ["TECHNICAL SKILLS & CERTIFICATES"],
    ["Category", "Skill", "Details", "Issuer", "IssueDate"],
    ["Languages", "Python", "Advanced", "", ""],
    ["Languages", "SQL", "", "", ""],
    ["", "AWS Certified Developer", "", "Amazon", "2021-05-01"],
    [],
    ["HONORS & AWARDS"],
    ["Name", "Issuer", "Date"],
    ["Dean's List", "University of London", "2013"],
]


@pytest.fixture
def master_rows() -> list[list[str]]:
    """Master resume rows as they come out of the tabular store."""
    return [list(row) for row in MASTER_ROWS]


@pytest.fixture
def analysis() -> JobDescriptionAnalysis:
    """A small, non-empty job description analysis."""
    return JobDescriptionAnalysis(
        job_title="Data Engineer",
        company_name="Initech",
        location="Remote",
        key_responsibilities=["Build pipelines"],
        required_technical_skills=["Python", "SQL"],
        primary_keywords=["Python", "pipelines", "SQL"],
    )
