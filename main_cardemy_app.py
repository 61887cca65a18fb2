# main_cardemy_app.py
import asyncio
import logging

import streamlit as st

from app_settings import load_app_settings, save_app_settings
from chat_transcript import Transcript
from input_capture import DEFAULT_LEARN_MODE, LEARN_MODE_LABELS, LEARN_MODES, capture_submission
from request_orchestrator import RequestOrchestrator
from ui_components import render_scroll_to_latest, render_transcript, render_transcript_entry

# --- Setup Logger ---
logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s')

# --- Streamlit Page Config (Should be the very first Streamlit command) ---
st.set_page_config(layout="centered", page_title="Cardemy", page_icon="🃏")

app_settings = load_app_settings()

if 'transcript' not in st.session_state: st.session_state.transcript = Transcript()
if 'server_url' not in st.session_state: st.session_state.server_url = app_settings.get("server_url")
if 'request_timeout' not in st.session_state: st.session_state.request_timeout = float(app_settings.get("request_timeout", 180.0))
if 'learn_mode' not in st.session_state: st.session_state.learn_mode = DEFAULT_LEARN_MODE

if 'orchestrator' not in st.session_state:
    st.session_state.orchestrator = RequestOrchestrator(st.session_state.transcript, server_url=st.session_state.server_url, timeout=st.session_state.request_timeout)
if 'pending_cycle' not in st.session_state: st.session_state.pending_cycle = None
if 'scrolled_to_entry_id' not in st.session_state: st.session_state.scrolled_to_entry_id = None


def capture_topic_submit():
    """Form callback: the topic box is cleared only when the submit carries a non-blank topic."""
    cycle = capture_submission(st.session_state.ti_topic_input, st.session_state.learn_mode)
    if cycle is None:
        logger.debug("Blank topic submitted; nothing to do.")
        return
    st.session_state.pending_cycle = cycle
    st.session_state.ti_topic_input = ""


def run_request_cycle(cycle, live_area):
    """Drive one cycle to completion, drawing its entries into `live_area` while the request is in flight."""
    transcript = st.session_state.transcript
    start = len(transcript)

    def _redraw_live(changed_transcript):
        with live_area.container():
            for entry in changed_transcript.entries_since(start):
                render_transcript_entry(entry, interactive=False)

    transcript.on_change = _redraw_live
    try:
        terminal_entry = asyncio.run(st.session_state.orchestrator.submit(cycle))
    finally:
        transcript.on_change = None
    logger.info(f"Request cycle finished with {type(terminal_entry).__name__}")
    return terminal_entry


# --- Sidebar ---
with st.sidebar:
    st.title("🃏 Cardemy")
    st.caption("AI flashcards from any topic.")
    st.markdown("---"); st.header("Settings")
    server_url_val_ui = st.text_input("Lesson Server URL", value=st.session_state.server_url, key="ti_server_url_setting")
    timeout_val_ui = st.number_input("Request Timeout (seconds)", min_value=5.0, max_value=600.0, value=st.session_state.request_timeout, step=5.0, key="ni_request_timeout_setting")
    if st.button("Save Settings", key="btn_save_settings"):
        if server_url_val_ui.strip():
            st.session_state.server_url = server_url_val_ui.strip(); st.session_state.request_timeout = float(timeout_val_ui)
            st.session_state.orchestrator.server_url = st.session_state.server_url; st.session_state.orchestrator.timeout = st.session_state.request_timeout
            app_settings.update({"server_url": st.session_state.server_url, "request_timeout": st.session_state.request_timeout})
            if save_app_settings(app_settings): st.success("Settings saved.")
            else: st.error("Settings could not be written to disk; they apply to this session only.")
        else: st.warning("Server URL cannot be empty.")

# --- Main Content ---
render_transcript(st.session_state.transcript)
live_cycle_area = st.empty()
if st.session_state.transcript.scroll_target_id != st.session_state.scrolled_to_entry_id:
    render_scroll_to_latest(st.session_state.transcript.scroll_target_id)
    st.session_state.scrolled_to_entry_id = st.session_state.transcript.scroll_target_id

st.radio(
    "Mode",
    options=list(LEARN_MODES),
    format_func=lambda m: LEARN_MODE_LABELS.get(m, m),
    horizontal=True,
    key="learn_mode",
)
with st.form("topic_input_form"):
    st.text_input("Topic", placeholder="e.g. Photosynthesis", key="ti_topic_input")
    st.form_submit_button("Make Flashcards", on_click=capture_topic_submit, use_container_width=True)

pending_cycle = st.session_state.pending_cycle
if pending_cycle is not None:
    st.session_state.pending_cycle = None
    run_request_cycle(pending_cycle, live_cycle_area)
    st.rerun()
