"""
Advisor query dispatch.

A question first goes through a small table of canned replies (greetings,
thanks). Anything else is sent as a single POST to the chat endpoint along
with the chat history and up to five catalog programs that look relevant:

    POST {ADVISOR_CHAT_URL}
        body:    {"chatHistory": [...], "userQuery": str, "programContext": [...]}
        returns: {"text": str}   or   {"error": str}

Every outcome, including failures, comes back as an AdvisorResult whose
text is ready to show to the user. Nothing is retried.

Public API:
    normalize_query(text) → str
    canned_reply(text) → str | None
    match_programs(query, catalog) → list[Program]
    AdvisorClient(url).dispatch(chat_history, query) → AdvisorResult
"""

import logging
import os
import re
from typing import Any, Literal

import requests
from pydantic import BaseModel

from catalog.loader import Catalog
from catalog.models import Program

log = logging.getLogger("advisor")

CHAT_URL = os.getenv("ADVISOR_CHAT_URL", "http://localhost:3000/api/chat")
TIMEOUT  = float(os.getenv("ADVISOR_TIMEOUT", "30"))
MAX_CONTEXT_PROGRAMS = 5

GREETING = "Hi there! I'm the Major Explorer advisor. How can I help you explore majors today?"

CANNED_REPLIES = {
    "hello": GREETING,
    "hi": GREETING,
    "hey": "Hey! I'm the Major Explorer advisor. How can I help you explore majors today?",
    "what can you do": (
        "I can help you find information about majors, compare them, or answer "
        "general questions about college life. What are you interested in?"
    ),
    "thanks": "You're welcome! Is there anything else I can help you with?",
    "thank you": "You're welcome! Let me know if you have more questions.",
}

RATE_LIMITED_MESSAGE = "You've reached the message limit for today. Please try again tomorrow."
EMPTY_REPLY_MESSAGE = "I'm sorry, I couldn't get a proper response. Please try again."
CONNECTION_ERROR_MESSAGE = (
    "I'm sorry, I encountered a connection error. Please check your network and try again. "
    "If the problem persists, please try again later."
)

_PUNCTUATION = re.compile(r"[^\w\s]")

Status = Literal["canned", "ok", "rate_limited", "server_error", "transport_error"]
ChatTurn = dict[str, Any]   # {"role": "user" | "model", "parts": [{"text": str}]}


class AdvisorResult(BaseModel):
    status: Status
    text: str

    @property
    def ok(self) -> bool:
        return self.status in ("canned", "ok")


# ---------------------------------------------------------------------------
# Local short-circuit
# ---------------------------------------------------------------------------

def normalize_query(text: str) -> str:
    return _PUNCTUATION.sub("", text.strip().lower())


def canned_reply(text: str) -> str | None:
    return CANNED_REPLIES.get(normalize_query(text))


# ---------------------------------------------------------------------------
# Program context
# ---------------------------------------------------------------------------

def _interest_program_ids(query: str, catalog: Catalog) -> set[str]:
    ids: set[str] = set()
    for interest in catalog.interests.values():
        if any(kw.lower() in query for kw in interest.keywords if kw):
            ids.update(interest.program_ids)
    return ids


def match_programs(query: str, catalog: Catalog, limit: int = MAX_CONTEXT_PROGRAMS) -> list[Program]:
    """
    Programs worth sending as context, in catalog order.

    A program matches when its name contains the query, the query mentions
    its degree type, or the query hits a keyword of an interest the program
    is mapped to.
    """
    q = query.lower()
    by_interest = _interest_program_ids(q, catalog)

    matched = []
    for p in catalog.programs:
        name_match = q in p.program_name.lower()
        degree_match = bool(p.degree_type) and p.degree_type.lower() in q
        if name_match or degree_match or p.program_id in by_interest:
            matched.append(p)
            if len(matched) >= limit:
                break
    return matched


def program_context(programs: list[Program]) -> list[dict[str, Any]]:
    return [
        {
            "program_name": p.program_name,
            "degree_type": p.degree_type,
            "program_credits": p.program_credits,
            "short_description": p.short_description,
            "total_credits": p.total_credits,
        }
        for p in programs
    ]


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

def _error_field(resp: requests.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None


class AdvisorClient:
    def __init__(
        self,
        catalog: Catalog,
        url: str = CHAT_URL,
        timeout: float = TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.catalog = catalog
        self.url     = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def dispatch(self, chat_history: list[ChatTurn], query: str) -> AdvisorResult:
        canned = canned_reply(query)
        if canned is not None:
            return AdvisorResult(status="canned", text=canned)

        programs = match_programs(query, self.catalog)
        payload = {
            "chatHistory": chat_history,
            "userQuery": query,
            "programContext": program_context(programs),
        }
        log.info("Advisor query=%r  context=%d programs", query, len(programs))

        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            log.error("Advisor request failed: %s", exc)
            return AdvisorResult(status="transport_error", text=CONNECTION_ERROR_MESSAGE)

        if resp.status_code == 429:
            return AdvisorResult(status="rate_limited", text=_error_field(resp) or RATE_LIMITED_MESSAGE)

        if not resp.ok:
            detail = _error_field(resp) or f"Server responded with status: {resp.status_code}"
            log.error("Advisor endpoint error %d: %s", resp.status_code, detail)
            return AdvisorResult(status="server_error", text=detail)

        try:
            body = resp.json()
        except ValueError as exc:
            log.error("Advisor response was not JSON: %s", exc)
            return AdvisorResult(status="transport_error", text=CONNECTION_ERROR_MESSAGE)

        text = body.get("text") if isinstance(body, dict) else None
        return AdvisorResult(status="ok", text=text or EMPTY_REPLY_MESSAGE)
