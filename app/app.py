"""
FastAPI application — JSON service over the program catalog.

Run as a script:
    python app/app.py

Or as a module:
    uvicorn app.app:app --reload

Endpoints:
    GET  /programs?q=&college=          program summaries
    GET  /programs/{id}                 program detail + faculty
    GET  /programs/{id}/requirements    rendered requirement tree
    GET  /departments
    GET  /compare?left=&right=&p3=&p4=  side-by-side comparison
    POST /advisor
        body:    {"chatHistory": [...], "userQuery": "..."}
        returns: {"status": str, "text": str}

Logs each request and wall-clock response time to stdout and logs/app.log
(rotating, 5 MB max, 3 backups).
"""

import asyncio
import logging
import logging.handlers
import os
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

# Ensure project root is on sys.path when running as a script (python app/app.py)
sys.path.insert(0, str(Path(__file__).parent.parent))

from advisor.dispatcher import CHAT_URL, TIMEOUT, AdvisorClient, AdvisorResult
from catalog.loader import Catalog, load_catalog
from catalog.models import Department, Professor, Program
from compare.selection import CompareSession
from compare.sharing import encode_params, share_url, sync_from_params
from compare.table import ComparisonTable, build_table, decision_prompt, page_title
from curriculum.tree import RenderedTree, render_tree

load_dotenv()

LOG_DIR  = Path(__file__).parent.parent / "logs"
LOG_FILE = LOG_DIR / "app.log"

def _setup_logging() -> None:
    LOG_DIR.mkdir(exist_ok=True)
    fmt = logging.Formatter("%(asctime)s  %(levelname)s  %(message)s")

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(fmt)

    # Rotate at 5 MB, keep 3 backups
    rotating = logging.handlers.RotatingFileHandler(
        LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    rotating.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(stream)
    root.addHandler(rotating)

_setup_logging()
log = logging.getLogger("api")

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DATA_DIR = Path(os.getenv("CATALOG_DATA_DIR", Path(__file__).parent.parent / "data"))
SITE_URL = os.getenv("SITE_URL", "http://localhost:8501")


# ---------------------------------------------------------------------------
# App + lifespan
# ---------------------------------------------------------------------------

_catalog: Catalog | None = None
_advisor: AdvisorClient | None = None


@asynccontextmanager
async def lifespan(_: FastAPI):
    global _catalog, _advisor

    log.info("Loading catalog from %s…", DATA_DIR)
    _catalog = load_catalog(DATA_DIR)
    log.info("  %d programs loaded.", len(_catalog))

    url = os.getenv("ADVISOR_CHAT_URL", CHAT_URL)
    timeout = float(os.getenv("ADVISOR_TIMEOUT", TIMEOUT))
    _advisor = AdvisorClient(_catalog, url=url, timeout=timeout)
    log.info("  Advisor client ready → %s (timeout %.0fs)", url, timeout)

    yield  # server runs here


app = FastAPI(title="Major Explorer", lifespan=lifespan)


def _get_catalog() -> Catalog:
    assert _catalog is not None, "Catalog not initialised"
    return _catalog


def _get_program(program_id: str) -> Program:
    program = _get_catalog().get_program(program_id)
    if program is None:
        raise HTTPException(status_code=404, detail=f"Unknown program: {program_id}")
    return program


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class ProgramSummary(BaseModel):
    program_id: str
    program_name: str
    degree_type: str
    college: str | None
    department: str | None
    short_description: str


class ProgramDetail(BaseModel):
    program: Program
    department_rank: str | None
    faculty: list[Professor]


class CompareResponse(BaseModel):
    shared: bool
    title: str
    share_query: dict[str, str]
    share_url: str
    table: ComparisonTable
    decision_prompt: str | None


class AdvisorRequest(BaseModel):
    chatHistory: list[dict[str, Any]] = Field(default_factory=list)
    userQuery: str


def _summary(p: Program) -> ProgramSummary:
    return ProgramSummary(
        program_id=p.program_id,
        program_name=p.program_name,
        degree_type=p.degree_type,
        college=p.department.college_name if p.department else None,
        department=p.department.department_name if p.department else None,
        short_description=p.short_description,
    )


def department_rank(p: Program, ranked_departments: int) -> str | None:
    if p.department is None or not p.department.rank:
        return None
    return f"Rank {p.department.rank} of {ranked_departments}"


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/programs", response_model=list[ProgramSummary])
def list_programs(q: str = "", college: str | None = None) -> list[ProgramSummary]:
    programs = _get_catalog().search_programs(q, college=college)
    log.info("programs q=%r  college=%r  hits=%d", q, college, len(programs))
    return [_summary(p) for p in programs]


@app.get("/programs/{program_id}", response_model=ProgramDetail)
def get_program(program_id: str) -> ProgramDetail:
    catalog = _get_catalog()
    program = _get_program(program_id)
    faculty = catalog.faculty_for(program.department.department_id) if program.department else []
    return ProgramDetail(
        program=program,
        department_rank=department_rank(program, catalog.ranked_department_count()),
        faculty=faculty,
    )


@app.get("/programs/{program_id}/requirements", response_model=RenderedTree)
def get_requirements(program_id: str) -> RenderedTree:
    return render_tree(_get_program(program_id).course_structure)


@app.get("/departments", response_model=list[Department])
def list_departments() -> list[Department]:
    return _get_catalog().departments


@app.get("/compare", response_model=CompareResponse)
def compare(
    left: str | None = None,
    right: str | None = None,
    p3: str | None = None,
    p4: str | None = None,
    ids: list[str] = Query(default=[]),
) -> CompareResponse:
    """
    Comparison for a shared link, or for an explicit ?ids=..&ids=.. list.

    Explicit ids go through the normal add() path, so duplicates and
    anything past the fourth program are dropped.
    """
    catalog = _get_catalog()
    session = CompareSession()
    for program_id in ids:
        program = catalog.get_program(program_id)
        if program is not None and not session.selection.add(program):
            log.info("compare: rejected %s (duplicate or selection full)", program_id)

    shared = sync_from_params(session, {"left": left, "right": right, "p3": p3, "p4": p4}, catalog)
    programs = session.selection.programs

    return CompareResponse(
        shared=shared,
        title=page_title(programs),
        share_query=encode_params(session.selection),
        share_url=share_url(SITE_URL, session.selection),
        table=build_table(programs, catalog.ranked_department_count()),
        decision_prompt=decision_prompt(programs) if len(programs) > 1 else None,
    )


@app.post("/advisor", response_model=AdvisorResult)
def advisor(req: AdvisorRequest) -> AdvisorResult:
    if not req.userQuery.strip():
        raise HTTPException(status_code=400, detail="Query must not be empty.")

    t0 = time.perf_counter()
    assert _advisor is not None, "Advisor client not initialised"
    result = _advisor.dispatch(req.chatHistory, req.userQuery)

    elapsed = time.perf_counter() - t0
    log.info("advisor query=%r  status=%s  %.2fs", req.userQuery, result.status, elapsed)
    return result


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _launch_server() -> None:
    config = uvicorn.Config(app, host="0.0.0.0", port=8000, reload=False)
    server = uvicorn.Server(config)

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        uvicorn.run(app, host="0.0.0.0", port=8000, reload=False)
        return

    log.warning(
        "Detected an existing asyncio event loop; serving with create_task() instead of asyncio.run()."
    )
    asyncio.create_task(server.serve())


if __name__ == "__main__":
    log.info("=== Major Explorer — starting up ===")
    _launch_server()
