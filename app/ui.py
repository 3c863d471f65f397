# Run from project root: streamlit run app/ui.py
# UI talks to backend API (POST /chat, GET /configs). No history on the server; each question is independent.

import os

import requests
import streamlit as st

# Backend config
API_BASE = os.environ.get("API_BASE", "http://localhost:3000")

st.title("Document Search Chat")

# Show which serving configs the backend will try (debug endpoint; may be disabled)
with st.expander("Backend configuration"):
    try:
        r = requests.get(f"{API_BASE}/configs", timeout=10)
        if r.ok:
            data = r.json()
            st.caption(f"Addressing: {data.get('addressing_mode')} · location: {data.get('location')}")
            st.caption(f"Generation: {data.get('generation_provider')} {data.get('generation_model') or ''}")
            for path in data.get("candidates") or []:
                st.code(path, language=None)
        elif r.status_code == 404:
            st.caption("Debug endpoints are disabled on this backend.")
        else:
            st.caption(f"Could not load configuration: {r.status_code} — {r.text[:200]}")
    except requests.RequestException:
        st.caption("Backend not reachable — start the API first.")

st.divider()

if "messages" not in st.session_state:
    st.session_state.messages = []
if st.button("New chat", key="new_chat"):
    st.session_state.messages = []
    st.rerun()


def _render_sources(sources: list[dict]) -> None:
    if sources:
        st.caption("Sources: " + " · ".join(f"[{i}] [{s['title']}]({s['url']})" for i, s in enumerate(sources, start=1)))


# Show previous messages (local display only)
for msg in st.session_state.messages:
    with st.chat_message(msg["role"]):
        st.markdown(msg["content"])
        _render_sources(msg.get("sources") or [])

# If we just submitted a query, show "Thinking..." while waiting for response
if st.session_state.get("pending_query"):
    prompt = st.session_state.pending_query
    sources: list[dict] = []
    with st.chat_message("assistant"):
        placeholder = st.empty()
        placeholder.caption("Thinking...")
        try:
            r = requests.post(f"{API_BASE}/chat", json={"query": prompt}, timeout=90)
            data = r.json() if r.headers.get("content-type", "").startswith("application/json") else {}
            answer = data.get("answer") or f"Error: {r.status_code} — {r.text[:200]}"
            if r.ok:
                sources = data.get("sources") or []
                placeholder.markdown(answer)
                _render_sources(sources)
            else:
                detail = data.get("message") or ""
                answer = f"{answer}: {detail}" if detail else answer
                placeholder.error(answer)
        except requests.RequestException as e:
            answer = f"Connection failed: {e}"
            placeholder.error(answer)
        st.session_state.messages.append({"role": "assistant", "content": answer, "sources": sources})
    del st.session_state["pending_query"]
    st.rerun()

if prompt := st.chat_input("Ask about a document, process or file name"):
    st.session_state.messages.append({"role": "user", "content": prompt})
    st.session_state.pending_query = prompt
    st.rerun()
