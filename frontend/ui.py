"""
Streamlit views: explore, program detail, compare and advisor.

Each view takes the catalog and the CompareSession explicitly; the entry
script (streamlit_app.py) owns both and keeps the session in
st.session_state.
"""

import streamlit as st

from advisor.dispatcher import AdvisorClient
from catalog.loader import Catalog
from catalog.models import Program
from compare.selection import MAX_COMPARE, CompareSession
from compare.sharing import SLOT_PARAMS, encode_params, share_url, sync_from_params
from compare.table import build_table, decision_prompt, page_title
from curriculum.tree import render_tree, to_markdown

CAPACITY_NOTICE = f"You can compare a maximum of {MAX_COMPARE} programs."


def _college(p: Program) -> str:
    return p.department.college_name if p.department else ""


def _write_share_params(session: CompareSession) -> None:
    """Mirror the selection into the left/right/p3/p4 query params."""
    for slot in SLOT_PARAMS:
        if slot in st.query_params:
            del st.query_params[slot]
    st.query_params.update(encode_params(session.selection))


# ---------------------------------------------------------------------------
# Compare tray
# ---------------------------------------------------------------------------

def compare_toggle(session: CompareSession, program: Program, key: str) -> None:
    selected = session.selection.contains(program.program_id)
    label = "Remove from compare" if selected else "Add to compare"
    if st.button(label, key=key):
        if not session.toggle(program):
            st.warning(CAPACITY_NOTICE)
        else:
            _write_share_params(session)
            st.rerun()


def compare_tray(session: CompareSession) -> None:
    if len(session.selection) == 0:
        return

    with st.sidebar:
        if not session.tray_visible:
            if st.button(f"Show comparison ({len(session.selection)})"):
                session.show_tray()
                st.rerun()
            return

        st.subheader(f"Compare Programs ({len(session.selection)}/{MAX_COMPARE})")
        for p in session.selection:
            cols = st.columns([4, 1])
            cols[0].write(p.program_name)
            if cols[1].button("✕", key=f"tray-remove-{p.program_id}"):
                session.selection.remove(p.program_id)
                _write_share_params(session)
                st.rerun()

        cols = st.columns(2)
        if cols[0].button("Clear All"):
            session.clear()
            _write_share_params(session)
            st.rerun()
        if cols[1].button("Hide"):
            session.hide_tray()
            st.rerun()

        if len(session.selection) < 2:
            st.caption("Add one more to compare")


# ---------------------------------------------------------------------------
# Explore
# ---------------------------------------------------------------------------

def explore_page(catalog: Catalog, session: CompareSession) -> None:
    st.title("Explore Programs")

    query = st.text_input("Search programs", placeholder="e.g. nursing")
    college = st.selectbox("College", ["All colleges"] + catalog.colleges())
    college_filter = None if college == "All colleges" else college

    programs = catalog.search_programs(query, college=college_filter)
    if not programs:
        st.info("No matching programs found.")
        return

    for p in programs:
        with st.container(border=True):
            st.markdown(f"**{p.program_name}** · {p.degree_type}")
            st.caption(_college(p))
            if p.short_description:
                st.write(p.short_description)
            cols = st.columns(2)
            if cols[0].button("Details", key=f"details-{p.program_id}"):
                st.query_params["program"] = p.program_id
                st.rerun()
            with cols[1]:
                compare_toggle(session, p, key=f"toggle-{p.program_id}")


# ---------------------------------------------------------------------------
# Program detail
# ---------------------------------------------------------------------------

def program_page(catalog: Catalog, session: CompareSession, program: Program) -> None:
    st.title(program.program_name)
    dept = program.department
    st.caption(" · ".join(
        x for x in (program.expanded_degree_type or program.degree_type,
                    dept.department_name if dept else "", _college(program)) if x
    ))
    if program.overview:
        st.write(program.overview)
    compare_toggle(session, program, key=f"detail-toggle-{program.program_id}")

    if program.you_might_like:
        st.subheader("Is This Major Right For You?")
        fit, not_fit = st.columns(2)
        with fit:
            st.markdown("**Why this is a great fit for you**")
            st.markdown("\n".join(f"- {item}" for item in program.you_might_like))
        with not_fit:
            st.markdown("**Why this might not be for you**")
            if program.not_for_you:
                st.markdown("\n".join(f"- {item}" for item in program.not_for_you))

    if program.course_structure:
        tree = render_tree(program.course_structure)
        with st.expander("Course Requirements", expanded=True):
            st.markdown(to_markdown(tree))

    with st.expander("Career Outlook", expanded=True):
        if program.career_outcomes:
            for outcome in program.career_outcomes:
                salary = f"${outcome.median_salary_mn:,.0f}" if outcome.median_salary_mn else "N/A"
                st.markdown(
                    f"**{outcome.occupation_title}** — median salary (MN) {salary}, "
                    f"10-year growth {outcome.growth_rate_10yr_mn or 'N/A'}"
                )
        else:
            st.caption("Specific career outcome data is not available for this program.")

        if program.related_job_titles:
            st.markdown(f"**Other Common Roles:** {', '.join(program.related_job_titles[:4])}")

    st.subheader("Program Snapshot")
    st.markdown(
        f"- Program Credits: {program.program_credits or 'N/A'}\n"
        f"- Total Credits: {program.total_credits or 'N/A'}\n"
        f"- Fall 2021 Enrollment: {program.enrollment_fall_2021 or 'N/A'}"
        f"{f' ({program.enrollment_trend})' if program.enrollment_trend else ''}\n"
        f"- Graduates (2021): {program.graduates_total or 'N/A'}"
    )

    if dept is not None:
        faculty = catalog.faculty_for(dept.department_id)
        if faculty:
            st.subheader("Related Faculty")
            for prof in faculty:
                rating = f"{prof.avg_rating:.1f}" if prof.avg_rating else "N/A"
                st.markdown(f"- **{prof.name}**, {prof.title} · rating {rating} ({prof.num_ratings or 0} reviews)")

    if program.recommended_minors:
        st.subheader("Minors pair well with")
        st.write(", ".join(m.name for m in program.recommended_minors))

    if program.clubs:
        st.subheader("Related Clubs")
        for club in program.clubs:
            st.markdown(f"- [{club.club_name}]({club.club_url})" if club.club_url else f"- {club.club_name}")


# ---------------------------------------------------------------------------
# Compare
# ---------------------------------------------------------------------------

def compare_page(catalog: Catalog, session: CompareSession, site_url: str) -> None:
    shared = sync_from_params(session, st.query_params.to_dict(), catalog)
    programs = session.selection.programs

    if not programs:
        st.title("Compare Programs")
        st.write("You haven't selected any programs to compare yet.")
    else:
        if shared:
            st.caption("Shared Comparison")
        st.title(page_title(programs).split(" | ")[0] if len(programs) > 1 else "Program Comparison")

        table = build_table(programs, catalog.ranked_department_count())
        header = "| | " + " | ".join(table.program_names) + " |"
        divider = "|---" * (len(programs) + 1) + "|"
        lines = [header, divider]
        for row in table.rows:
            cells = [f"**:green[{c.display}]**" if c.is_best else c.display for c in row.cells]
            lines.append(f"| {row.label} | " + " | ".join(cells) + " |")
        st.markdown("\n".join(lines))

        for p in programs:
            if st.button(f"Remove {p.program_name}", key=f"compare-remove-{p.program_id}"):
                session.selection.remove(p.program_id)
                _write_share_params(session)
                st.rerun()

        if st.button("Share Comparison"):
            _write_share_params(session)
            st.code(share_url(site_url, session.selection), language=None)

        if len(programs) > 1 and st.button("Still can't decide? Ask Advisor"):
            st.session_state["advisor_prompt"] = decision_prompt(programs)
            st.info("Open the Advisor page to continue.")

    if not session.selection.is_full:
        choices = catalog.search_programs(exclude_ids=set(session.selection.ids))
        pick = st.selectbox(
            f"Add Program to Comparison ({len(session.selection)}/{MAX_COMPARE})",
            [None] + choices,
            format_func=lambda p: "—" if p is None else p.program_name,
        )
        if pick is not None:
            if session.selection.add(pick):
                _write_share_params(session)
                st.rerun()
            st.warning(CAPACITY_NOTICE)


# ---------------------------------------------------------------------------
# Advisor
# ---------------------------------------------------------------------------

def advisor_page(client: AdvisorClient) -> None:
    st.title("Ask the Advisor")

    history = st.session_state.setdefault("advisor_history", [])
    for turn in history:
        with st.chat_message("user" if turn["role"] == "user" else "assistant"):
            st.write(turn["parts"][0]["text"])

    prompt = st.chat_input("Ask about majors…") or st.session_state.pop("advisor_prompt", None)
    if not prompt:
        return

    with st.chat_message("user"):
        st.write(prompt)

    with st.spinner("Thinking…"):
        result = client.dispatch(list(history), prompt)

    with st.chat_message("assistant"):
        if result.ok:
            st.write(result.text)
        else:
            st.error(result.text)

    history.append({"role": "user", "parts": [{"text": prompt}]})
    history.append({"role": "model", "parts": [{"text": result.text}]})
