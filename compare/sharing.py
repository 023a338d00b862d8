"""
Shareable comparison links.

Selection slots 1-4 map to fixed query parameters:

    ?left=<id>&right=<id>&p3=<id>&p4=<id>

Only populated slots are emitted. Decoding resolves each id against the
catalog and silently drops ids it cannot find.
"""

from collections.abc import Mapping
from urllib.parse import urlencode

from catalog.loader import Catalog
from catalog.models import Program
from compare.selection import CompareSelection, CompareSession

SLOT_PARAMS = ("left", "right", "p3", "p4")


def encode_params(selection: CompareSelection) -> dict[str, str]:
    return {slot: program.program_id for slot, program in zip(SLOT_PARAMS, selection)}


def share_url(base_url: str, selection: CompareSelection) -> str:
    params = encode_params(selection)
    if not params:
        return base_url
    return f"{base_url}?{urlencode(params)}"


def slot_ids(params: Mapping[str, str | None]) -> list[str]:
    """Non-empty slot values in slot order."""
    return [params[slot] for slot in SLOT_PARAMS if params.get(slot)]


def decode_params(params: Mapping[str, str | None], catalog: Catalog) -> list[Program]:
    programs = []
    for program_id in slot_ids(params):
        program = catalog.get_program(program_id)
        if program is not None:
            programs.append(program)
    return programs


def sync_from_params(
    session: CompareSession,
    params: Mapping[str, str | None],
    catalog: Catalog,
) -> bool:
    """
    Seed session from a shared link.

    Returns True when any slot parameter is present (a shared view). The
    selection is replaced only if something resolved and the resolved id
    sequence differs from what the session already holds.
    """
    if not slot_ids(params):
        return False

    decoded = decode_params(params, catalog)
    if decoded and [p.program_id for p in decoded] != session.selection.ids:
        session.selection.replace_all(decoded)
    return True
