import json

import pytest

from catalog.loader import load_catalog


DEPARTMENTS = [
    {
        "department_id": "cs",
        "department_name": "Computer Science",
        "college_name": "College of Science and Engineering",
        "total_enrollment_fall_2021": 412,
        "rank": 2,
    },
    {
        "department_id": "nursing",
        "department_name": "Nursing",
        "college_name": "College of Nursing and Health Sciences",
        "total_enrollment_fall_2021": 980,
        "rank": 1,
    },
    {
        "department_id": "art",
        "department_name": "Art & Design",
        "college_name": "College of Liberal Arts",
        "total_enrollment_fall_2021": None,
        "rank": None,
    },
]

PROGRAMS = [
    {
        "program_id": "computer-science-bs",
        "program_name": "Computer Science",
        "degree_type": "BS",
        "expanded_degree_type": "Bachelor of Science",
        "program_credits": 62,
        "total_credits": 120,
        "enrollment_fall_2021": 310,
        "graduates_total": 48,
        "enrollment_trend": "Up",
        "short_description": "Software, systems and theory.",
        "department_id": "cs",
        "career_outcomes": [{"occupation_title": "Software Developer", "median_salary_mn": 112000}],
        "clubs": None,
        "you_might_like": ["Puzzles and problem solving", "Building things people use"],
        "not_for_you": ["Avoiding math"],
        "related_job_titles": [
            "Software Engineer", "Systems Analyst", "Web Developer", "Data Engineer", "QA Tester",
        ],
    },
    {
        "program_id": "nursing-bs",
        "program_name": "Nursing",
        "degree_type": "BS",
        "program_credits": "72-74",
        "total_credits": 124,
        "enrollment_fall_2021": 540,
        "graduates_total": 120,
        "short_description": "Pre-licensure nursing.",
        "department_id": "nursing",
        "career_outcomes": [{"occupation_title": "Registered Nurse", "median_salary_mn": 86000}],
    },
    {
        "program_id": "art-ba",
        "program_name": "Studio Art",
        "degree_type": "BA",
        "total_credits": 120,
        "short_description": "Painting, sculpture and print.",
        "department_id": "art",
    },
    {
        "program_id": "data-science-minor",
        "program_name": "Data Science",
        "degree_type": "Minor",
        "program_credits": 21,
        "department_id": "missing-dept",
    },
    {
        "program_id": "computer-science-minor",
        "program_name": "Computer Science",
        "degree_type": "Minor",
        "program_credits": 24,
        "department_id": "cs",
    },
]

REQUIREMENTS = {
    "computer-science-bs": [
        {
            "group_name": "†Major Requirements (62 credits)",
            "items": [
                {"type": "text", "content": "2023-2024 data may be outdated"},
                {"type": "course", "course_id": "CS 234"},
                {"type": "course", "course_title": "CS 249 - Data Structures", "credits": "3 credits"},
            ],
            "subgroups": [
                {
                    "group_name": "Electives (Choose 9 credits)",
                    "notes": ["Any 300-level CS course counts."],
                    "items": [
                        {"type": "text", "content": "See the 2024-2025 catalog"},
                        {"type": "course", "course_title": "Special Topics", "credits": "3"},
                    ],
                }
            ],
        }
    ],
}

COURSES_DB = {
    "CS 234": {"title": "Intermediate Programming", "credits": "4"},
}

PROFESSORS = {
    "cs": [
        {"name": "Ada Byron", "title": "Professor", "avg_rating": 4.6, "num_ratings": 31},
        {"name": "Alan Turing", "title": "Associate Professor"},
        {"name": "Grace Hopper", "title": "Professor"},
        {"name": "Edsger Dijkstra", "title": "Emeritus"},
    ],
}

INTERESTS = {
    "health": {"keywords": ["patients", "healthcare"], "program_ids": ["nursing-bs"]},
}


@pytest.fixture
def data_dir(tmp_path):
    """Data directory holding a small, complete catalog."""
    files = {
        "departments.json": DEPARTMENTS,
        "programs.json": PROGRAMS,
        "course_requirements.json": REQUIREMENTS,
        "courses_db.json": COURSES_DB,
        "professors.json": PROFESSORS,
        "interests.json": INTERESTS,
    }
    for name, payload in files.items():
        (tmp_path / name).write_text(json.dumps(payload), encoding="utf-8")
    return tmp_path


@pytest.fixture
def catalog(data_dir):
    return load_catalog(data_dir)
