"""
Catalog records: programs, departments and course-requirement trees.

All records are read-only pydantic models built from the static JSON files
the scrapers produce. Optional fields default to "nothing to show" so a
sparse record never fails to load.

Requirement items form a tagged union on the ``type`` field:
    {"type": "course", "course_id": "CS 234", "course_title": "...", "credits": "3"}
    {"type": "text",   "content": "Complete one of the following"}
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)


# ---------------------------------------------------------------------------
# Organisation
# ---------------------------------------------------------------------------

class Department(_Record):
    department_id: str
    department_name: str = ""
    college_name: str = ""
    total_enrollment_fall_2021: int | None = None
    rank: int | None = None


class Professor(_Record):
    name: str
    title: str = ""
    avg_rating: float | None = None
    num_ratings: int | None = None
    would_take_again_percent: float | None = None
    rmp_url: str | None = None


# ---------------------------------------------------------------------------
# Course requirements
# ---------------------------------------------------------------------------

class Course(_Record):
    type: Literal["course"] = "course"
    course_id: str | None = None
    course_title: str = ""
    credits: str | None = None


class CourseText(_Record):
    type: Literal["text"] = "text"
    content: str = ""


CourseItem = Annotated[Union[Course, CourseText], Field(discriminator="type")]


class CourseGroup(_Record):
    group_name: str = ""
    credits_required: str | None = None
    items: list[CourseItem] = []
    subgroups: list["CourseGroup"] = []
    notes: list[str] = []

    @field_validator("items", "subgroups", "notes", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        # scraped files write null for "no entries"
        return [] if value is None else value


# ---------------------------------------------------------------------------
# Programs
# ---------------------------------------------------------------------------

class CareerOutcome(_Record):
    occupation_title: str = ""
    median_salary_mn: float | None = None
    growth_rate_10yr_mn: str | None = None
    occupation_data_url: str | None = None


class Club(_Record):
    club_id: str | None = None
    club_name: str = ""
    club_url: str | None = None


class Minor(_Record):
    id: str
    name: str = ""


class Program(_Record):
    program_id: str
    program_name: str
    degree_type: str = ""
    expanded_degree_type: str | None = None
    credential_level: str | None = None
    program_credits: int | float | str | None = None
    total_credits: int | float | None = None
    enrollment_fall_2021: int | None = None
    graduates_total: int | None = None
    enrollment_trend: Literal["Up", "Down", "Stable"] | None = None
    short_description: str = ""
    overview: str = ""
    program_page_url: str | None = None
    location: str = ""
    department: Department | None = None
    career_outcomes: list[CareerOutcome] = []
    clubs: list[Club] = []
    recommended_minors: list[Minor] = []
    related_job_titles: list[str] = []
    you_might_like: list[str] = []
    not_for_you: list[str] = []
    course_structure: list[CourseGroup] | None = None

    @field_validator(
        "career_outcomes", "clubs", "recommended_minors",
        "related_job_titles", "you_might_like", "not_for_you",
        mode="before",
    )
    @classmethod
    def none_as_empty(cls, value):
        return [] if value is None else value

    @property
    def median_salary(self) -> float | None:
        """Median salary of the first listed career outcome, if any."""
        if not self.career_outcomes:
            return None
        return self.career_outcomes[0].median_salary_mn


class Interest(_Record):
    keywords: list[str] = []
    program_ids: list[str] = []
