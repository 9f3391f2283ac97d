"""Streamlit Web UI for magic-writer.

Left: prompt + attachments to generate a draft, and the "Get Suggestions" action.
Right: the editor text, an overlay preview with per-edit Accept/Reject, and a
rewrite form for a selected passage.
"""

from __future__ import annotations

import asyncio
import logging
import os

logger = logging.getLogger(__name__)

import nest_asyncio
import streamlit as st
from dotenv import load_dotenv
from markupsafe import escape

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets → os.environ so the Anthropic client can read it
if "ANTHROPIC_API_KEY" not in os.environ:
    try:
        os.environ["ANTHROPIC_API_KEY"] = st.secrets["ANTHROPIC_API_KEY"]
    except Exception:
        pass

from magic_writer.clients.llm_client import LLMClient
from magic_writer.clients.text_service import TextService
from magic_writer.config import load_config
from magic_writer.editor.controller import ReconciliationController
from magic_writer.models.attachments import AttachedFile
from magic_writer.models.edits import EditKind, PendingEdit

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Magic Writer",
    page_icon=":sparkles:",
    layout="wide",
)

OVERLAY_CSS = """
<style>
.editor-preview { white-space: pre-wrap; line-height: 1.7; font-size: 1.05rem; }
.suggestion-underline { text-decoration: underline wavy #6366f1; cursor: pointer; }
.grammar-error { text-decoration: underline wavy #ef4444; cursor: pointer; }
</style>
"""

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@st.cache_resource
def _get_config():
    return load_config()


def _get_controller() -> ReconciliationController:
    if "controller" not in st.session_state:
        config = _get_config()
        llm = LLMClient(timeout=config.llm.timeout, max_retries=config.llm.max_retries)
        service = TextService(
            llm,
            config.llm,
            suggest_min_chars=config.editor.suggest_min_chars,
            grammar_min_chars=config.editor.grammar_min_chars,
        )
        st.session_state["llm"] = llm
        st.session_state["controller"] = ReconciliationController(service, config=config.editor)
    return st.session_state["controller"]


def _sync_editor_text() -> None:
    """Push the document's text back into the text area."""
    st.session_state["editor_text"] = _get_controller().document.text


def _on_user_edit() -> None:
    controller = _get_controller()

    async def _edit_and_check():
        controller.on_user_edit(str(escape(st.session_state["editor_text"])))
        # A committed text area edit is already a pause in typing.
        await controller.flush_grammar_check()

    asyncio.run(_edit_and_check())


def _on_resolve(edit: PendingEdit, accept: bool) -> None:
    _get_controller().resolve(edit.id, accept, edit.kind)
    _sync_editor_text()


def _on_suggest() -> None:
    controller = _get_controller()
    suggestions = asyncio.run(controller.request_suggestions())
    if not suggestions:
        st.session_state["flash"] = "No suggestions for this text."


def _render_edit(edit: PendingEdit, rendered: bool) -> None:
    label = "Grammar" if edit.kind is EditKind.GRAMMAR else "Style"
    with st.container(border=True):
        st.markdown(f"**{label}:** ~~{edit.match_text}~~ → **{edit.replacement_text}**")
        if edit.annotation:
            st.caption(edit.annotation)
        if not rendered:
            st.caption("Not found in the current text.")
        col1, col2 = st.columns(2)
        col1.button(
            "Accept",
            key=f"accept_{edit.id}",
            on_click=_on_resolve,
            args=(edit, True),
            disabled=not rendered,
        )
        col2.button("Reject", key=f"reject_{edit.id}", on_click=_on_resolve, args=(edit, False))


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

controller = _get_controller()
st.markdown(OVERLAY_CSS, unsafe_allow_html=True)
if st.session_state.pop("sync_editor", False):
    _sync_editor_text()

with st.sidebar:
    st.title("Magic Writer")
    st.subheader("Start Writing")
    prompt = st.text_area("What do you want to write?", height=150, placeholder="A blog post about...")
    uploads = st.file_uploader("Attach files", accept_multiple_files=True)

    if st.button("Generate Draft", type="primary", disabled=not prompt.strip()):
        files = [AttachedFile.from_bytes(f.name, f.getvalue(), f.type or None) for f in uploads or []]
        with st.spinner("Generating your draft..."):
            asyncio.run(controller.generate(prompt, files))
        _sync_editor_text()
        st.rerun()

    st.divider()
    st.subheader("Refine")
    st.button("Get Suggestions", on_click=_on_suggest, disabled=not controller.document.text.strip())

    busy = sorted(mode.value for mode in controller.active_modes)
    if busy:
        st.caption(f"Working: {', '.join(busy)}")

if "flash" in st.session_state:
    st.info(st.session_state.pop("flash"))

editor_col, review_col = st.columns([3, 2])

with editor_col:
    st.text_area(
        "Editor",
        key="editor_text",
        height=320,
        on_change=_on_user_edit,
        placeholder="Your generated content will appear here...",
    )
    st.markdown("**Preview**")
    st.markdown(
        f'<div class="editor-preview">{controller.content}</div>',
        unsafe_allow_html=True,
    )

    with st.form("rewrite_form", clear_on_submit=True):
        st.markdown("**Rewrite with AI**")
        fragment = st.text_input("Passage to rewrite")
        instruction = st.text_input("Instruction", placeholder="Make it more formal...")
        submitted = st.form_submit_button("Go")
    if submitted and fragment.strip() and instruction.strip():
        if controller.rewriter.select_text(fragment) is None:
            st.warning("Passage not found in the document.")
        else:
            with st.spinner("Rewriting..."):
                rewritten = asyncio.run(controller.rewrite_selection(instruction))
            if rewritten is None:
                st.warning("Rewrite failed; the text was left unchanged.")
            else:
                st.session_state["sync_editor"] = True
                st.rerun()

with review_col:
    grammar = controller.store.grammar_errors
    style = controller.store.style_suggestions
    if not grammar and not style:
        st.caption("No pending suggestions.")
    content = controller.content
    if grammar:
        st.subheader(f"Grammar ({len(grammar)})")
        for edit in grammar:
            _render_edit(edit, f'id="{edit.dom_id}"' in content)
    if style:
        st.subheader(f"Suggestions ({len(style)})")
        for edit in style:
            _render_edit(edit, f'id="{edit.dom_id}"' in content)

    llm = st.session_state.get("llm")
    if llm is not None and llm._token_log:
        with st.expander("Token usage"):
            st.write(
                {
                    "input": sum(t[1] for t in llm._token_log),
                    "output": sum(t[2] for t in llm._token_log),
                    "calls": len(llm._token_log),
                }
            )
