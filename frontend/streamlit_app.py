"""
Streamlit frontend for Major Explorer.

    streamlit run frontend/streamlit_app.py

Loads the catalog once per server process, keeps one CompareSession per
browser session, and routes between the views in ui.py. A shared
comparison link (?left=..&right=..) opens straight on the Compare page.
"""

import os
import sys
from pathlib import Path

import streamlit as st
from dotenv import load_dotenv

# Ensure project root is on sys.path when launched via `streamlit run`
sys.path.insert(0, str(Path(__file__).parent.parent))

from advisor.dispatcher import CHAT_URL, TIMEOUT, AdvisorClient
from catalog.loader import Catalog, load_catalog
from compare.selection import CompareSession
from compare.sharing import slot_ids, sync_from_params
from frontend import ui

load_dotenv()

DATA_DIR = Path(os.getenv("CATALOG_DATA_DIR", Path(__file__).parent.parent / "data"))
SITE_URL = os.getenv("SITE_URL", "http://localhost:8501")
ADVISOR_URL = os.getenv("ADVISOR_CHAT_URL", CHAT_URL)
ADVISOR_TIMEOUT = float(os.getenv("ADVISOR_TIMEOUT", TIMEOUT))

PAGES = ("Explore", "Compare", "Advisor")


@st.cache_resource
def _load_catalog(data_dir: str) -> Catalog:
    return load_catalog(Path(data_dir))


st.set_page_config(page_title="Major Explorer", layout="wide")

catalog = _load_catalog(str(DATA_DIR))
session: CompareSession = st.session_state.setdefault("compare_session", CompareSession())

params = st.query_params.to_dict()
sync_from_params(session, params, catalog)

start_page = st.session_state.setdefault("start_page", "Compare" if slot_ids(params) else "Explore")
page = st.sidebar.radio("Page", PAGES, index=PAGES.index(start_page))
ui.compare_tray(session)

program_id = st.query_params.get("program")
program = catalog.get_program(program_id) if program_id else None

if page == "Explore" and program is not None:
    if st.button("← Back to programs"):
        del st.query_params["program"]
        st.rerun()
    ui.program_page(catalog, session, program)
elif page == "Explore":
    ui.explore_page(catalog, session)
elif page == "Compare":
    ui.compare_page(catalog, session, SITE_URL)
else:
    ui.advisor_page(AdvisorClient(catalog, url=ADVISOR_URL, timeout=ADVISOR_TIMEOUT))
