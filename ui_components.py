import html

import streamlit as st
import streamlit.components.v1 as components

from carousel_engine import BACK_FACE
from chat_transcript import CardCarousel, ThinkingPlaceholder

module_logger = st.logger.get_logger(__name__)

CARD_CONTAINER_HEIGHT = "260px"
GREETING_TITLE = "Hi, I'm Cardemy 👋"
GREETING_TEXT = "Tell me a topic and I'll turn it into flashcards. Pick **Revision** for a quick review or **Learning** for a full first-time deck."

FRONT_FACE_STYLE = f"""border: 2px solid #718096; background-color: #FFFFFF; color: #2D3748; padding: 20px; text-align: center; height: {CARD_CONTAINER_HEIGHT}; display: flex; flex-direction: column; justify-content: center; align-items: center; border-radius: 10px; font-size: 1.5em; font-weight: bold; box-shadow: 0 6px 12px rgba(0,0,0,0.15); overflow-y: auto;"""
BACK_FACE_STYLE = f"""border: 2px solid #38B2AC; background-color: #F7FAFC; color: #2D3748; padding: 20px; text-align: center; height: {CARD_CONTAINER_HEIGHT}; display: flex; flex-direction: column; justify-content: center; align-items: center; border-radius: 10px; font-size: 1.15em; box-shadow: 0 6px 12px rgba(0,0,0,0.15); overflow-y: auto;"""


def card_face_html(frame):
    """HTML for the single legible face of the presented card. The hidden face is never emitted."""
    style = BACK_FACE_STYLE if frame.visible_face == BACK_FACE else FRONT_FACE_STYLE
    text_html = html.escape(frame.visible_text).replace(chr(10), '<br>')
    return f"<div class='card-face card-{frame.visible_face}' style='{style}'><p class='card-text'>{text_html}</p></div>"


def plain_text_html(text):
    """Show user/bot text literally: escaped and kept on one HTML line so markdown never applies."""
    return f"<div class='chat-text'>{html.escape(text).replace(chr(10), '<br>')}</div>"


def render_scroll_to_latest(target_id):
    """Bring the newest chat message into view. The target id changes the iframe so the script reruns per new entry."""
    module_logger.debug(f"Scrolling to newest transcript entry {target_id}")
    components.html(f"""
        <script>
        // scroll target: {html.escape(str(target_id))}
        const doc = window.parent.document;
        const messages = doc.querySelectorAll('[data-testid="stChatMessage"]');
        if (messages.length) {{
            messages[messages.length - 1].scrollIntoView({{behavior: 'smooth', block: 'end'}});
        }}
        </script>
    """, height=0)


def render_greeting():
    with st.container():
        st.markdown(f"### {GREETING_TITLE}")
        st.markdown(GREETING_TEXT)


def render_card_carousel(entry: CardCarousel, interactive: bool = True):
    carousel = entry.carousel
    frame = carousel.render_frame()
    st.markdown(card_face_html(frame), unsafe_allow_html=True)
    if not interactive:
        st.caption(frame.position_label)
        return

    key_base = f"carousel_{entry.entry_id}"
    nav_cols = st.columns([1, 1, 1, 1])
    with nav_cols[0]:
        if st.button("⬅️ Prev", disabled=frame.prev_disabled, key=f"{key_base}_prev_btn", use_container_width=True):
            carousel.prev(); st.rerun()
    with nav_cols[1]:
        st.markdown(f"<div class='card-counter' style='text-align:center; padding-top: 8px; color: #4A5568;'>{html.escape(frame.position_label)}</div>", unsafe_allow_html=True)
    with nav_cols[2]:
        if st.button("Flip Card 🃏", key=f"{key_base}_flip_btn", use_container_width=True):
            carousel.flip(); st.rerun()
    with nav_cols[3]:
        if st.button("Next ➡️", disabled=frame.next_disabled, key=f"{key_base}_next_btn", use_container_width=True):
            carousel.next(); st.rerun()


def render_transcript_entry(entry, interactive: bool = True):
    with st.chat_message(entry.role):
        if isinstance(entry, ThinkingPlaceholder):
            st.markdown(f"<span class='bot-thinking' style='color: #A0AEC0; font-size: 1.4em;'>{entry.text}</span>", unsafe_allow_html=True)
        elif isinstance(entry, CardCarousel):
            render_card_carousel(entry, interactive=interactive)
        else:
            st.markdown(plain_text_html(entry.text), unsafe_allow_html=True)


def render_transcript(transcript, interactive: bool = True):
    if not transcript.has_greeting_been_dismissed:
        render_greeting()
    for entry in transcript:
        render_transcript_entry(entry, interactive=interactive)
