"""
Catalog loader: reads the scraped JSON files and joins them into Programs.

Input files (all under one data directory, every one optional):
    programs.json             list of program records (department_id reference)
    departments.json          list of department records
    course_requirements.json  {program_id: [CourseGroup, ...]}
    courses_db.json           {course_id: {"title": ..., "credits": ...}}
    professors.json           {department_id: [Professor, ...]}
    interests.json            {interest: {"keywords": [...], "program_ids": [...]}}

Requirement files may be in the compacted form where a course item only
carries its course_id; those items are hydrated from courses_db.json.
Fields already present on the item win over the shared course record.

Public API:
    load_catalog(data_dir) → Catalog
    Catalog.get_program(id) / search_programs(term, exclude_ids) / faculty_for(id)
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from catalog.models import Department, Interest, Professor, Program

DATA_DIR = Path(__file__).parent.parent / "data"

PROGRAMS_FILE     = "programs.json"
DEPARTMENTS_FILE  = "departments.json"
REQUIREMENTS_FILE = "course_requirements.json"
COURSES_DB_FILE   = "courses_db.json"
PROFESSORS_FILE   = "professors.json"
INTERESTS_FILE    = "interests.json"

log = logging.getLogger("catalog")

Record = dict[str, Any]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def load(path: Path, default: Any) -> Any:
    """Load a JSON document from disk; return default if the file doesn't exist."""
    if not path.exists():
        log.warning("%s not found — treating as empty.", path.name)
        return default
    return json.loads(path.read_text(encoding="utf-8"))


def hydrate_items(items: list[Record], courses_db: dict[str, Record]) -> list[Record]:
    """Back-fill compacted course references from the shared course table."""
    hydrated = []
    for item in items:
        course_id = item.get("course_id")
        if item.get("type") == "course" and course_id and course_id in courses_db:
            shared = courses_db[course_id]
            item = {
                "course_title": shared.get("title", ""),
                "credits": shared.get("credits"),
                **{k: v for k, v in item.items() if v not in (None, "")},
            }
        hydrated.append(item)
    return hydrated


def hydrate_group(group: Record, courses_db: dict[str, Record]) -> Record:
    group = dict(group)
    group["items"] = hydrate_items(group.get("items") or [], courses_db)
    group["subgroups"] = [hydrate_group(g, courses_db) for g in group.get("subgroups") or []]
    return group


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class Catalog:
    """Read-only view over every loaded program and department."""

    def __init__(
        self,
        programs: list[Program],
        departments: list[Department],
        professors: dict[str, list[Professor]] | None = None,
        interests: dict[str, Interest] | None = None,
    ):
        self.programs    = programs
        self.departments = departments
        self.professors  = professors or {}
        self.interests   = interests or {}
        self._by_id = {p.program_id: p for p in programs}

    def __len__(self) -> int:
        return len(self.programs)

    def get_program(self, program_id: str) -> Program | None:
        return self._by_id.get(program_id)

    def search_programs(
        self,
        term: str = "",
        exclude_ids: set[str] | frozenset[str] = frozenset(),
        college: str | None = None,
    ) -> list[Program]:
        """Programs whose name contains term (case-insensitive), in source order."""
        needle = term.strip().lower()
        results = []
        for p in self.programs:
            if p.program_id in exclude_ids:
                continue
            if needle and needle not in p.program_name.lower():
                continue
            if college and (p.department is None or p.department.college_name != college):
                continue
            results.append(p)
        return results

    def colleges(self) -> list[str]:
        return sorted({d.college_name for d in self.departments if d.college_name})

    def ranked_department_count(self) -> int:
        """Number of departments that carry enrollment figures (the rank denominator)."""
        return sum(1 for d in self.departments if d.total_enrollment_fall_2021 is not None)

    def faculty_for(self, department_id: str, limit: int = 3) -> list[Professor]:
        return self.professors.get(department_id, [])[:limit]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _build_program(
    raw: Record,
    departments: dict[str, Department],
    requirements: dict[str, list[Record]],
    courses_db: dict[str, Record],
) -> Program | None:
    record = dict(raw)
    dept_id = record.pop("department_id", None)
    if dept_id is not None and "department" not in record:
        record["department"] = departments.get(str(dept_id))

    groups = requirements.get(str(record.get("program_id")))
    if groups is not None:
        record["course_structure"] = [hydrate_group(g, courses_db) for g in groups]

    try:
        return Program.model_validate(record)
    except ValidationError as exc:
        log.warning("Skipping program %r: %s", record.get("program_id"), exc)
        return None


def load_catalog(data_dir: Path = DATA_DIR) -> Catalog:
    """Load and join every catalog file under data_dir."""
    data_dir = Path(data_dir)

    departments = [
        Department.model_validate(d) for d in load(data_dir / DEPARTMENTS_FILE, [])
    ]
    dept_index = {d.department_id: d for d in departments}

    requirements = load(data_dir / REQUIREMENTS_FILE, {})
    courses_db   = load(data_dir / COURSES_DB_FILE, {})

    programs = []
    for raw in load(data_dir / PROGRAMS_FILE, []):
        program = _build_program(raw, dept_index, requirements, courses_db)
        if program is not None:
            programs.append(program)

    professors = {
        str(dept_id): [Professor.model_validate(p) for p in profs]
        for dept_id, profs in load(data_dir / PROFESSORS_FILE, {}).items()
    }
    interests = {
        name: Interest.model_validate(entry)
        for name, entry in load(data_dir / INTERESTS_FILE, {}).items()
    }

    log.info(
        "Catalog loaded: %d programs, %d departments, %d requirement trees.",
        len(programs), len(departments), len(requirements),
    )
    return Catalog(programs, departments, professors, interests)
