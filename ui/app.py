from __future__ import annotations

import asyncio

import pandas as pd
import streamlit as st

from activex_scanner import ActiveXScanner, FileResult, ScanBatch, SourceFile

st.set_page_config(
    page_title="ActiveX Scanner",
    page_icon="🛡️",
    layout="wide",
    initial_sidebar_state="collapsed",
)


@st.cache_resource
def _get_scanner() -> ActiveXScanner:
    return ActiveXScanner()


scanner = _get_scanner()

# Bumping the key is the only way to empty a file_uploader.
st.session_state.setdefault("uploader_key", 0)


def _reset() -> None:
    st.session_state.pop("last_batch", None)
    st.session_state.uploader_key += 1


# ── Header / upload ───────────────────────────────────────────────────────────

st.title("🛡️ ActiveX Scanner")
st.caption(
    "Scans text files locally for ActiveX indicators. "
    "File content never leaves this session."
)

uploads = st.file_uploader(
    "Drop files here or browse",
    accept_multiple_files=True,
    key=f"uploader_{st.session_state.uploader_key}",
)

with st.expander("Keywords", expanded=False):
    st.code("\n".join(scanner.keywords), language="text")

if st.button("🔍 Scan", type="primary", disabled=not uploads):
    sources = [SourceFile.from_bytes(u.name, u.getvalue()) for u in uploads]
    with st.spinner("Scanning …"):
        st.session_state.last_batch = asyncio.run(scanner.scan(sources))


# ── Results ───────────────────────────────────────────────────────────────────

def _render_file(result: FileResult) -> None:
    if result.error is not None:
        st.error(f"**{result.file_name}:** {result.error}")
        return

    findings = result.findings or []
    with st.expander(f"{result.file_name} ({len(findings)} finding(s))", expanded=True):
        for f in findings:
            st.markdown(f'**Found "{f.keyword}"** (position {f.position})')
            # Snippets are already escaped for HTML.
            st.markdown(f"<pre>{f.snippet}</pre>", unsafe_allow_html=True)


def _render_batch(batch: ScanBatch) -> None:
    if batch.is_safe:
        st.success(
            f"**No ActiveX indicators found**  \n"
            f"Scanned {len(batch)} file(s) successfully."
        )
    else:
        st.warning("**Possible ActiveX indicators detected**")

        rows = [
            {"File": r.file_name, "Keyword": f.keyword, "Position": f.position}
            for r in batch
            for f in r.findings or []
        ]
        if rows:
            df = pd.DataFrame(rows)
            col_table, col_chart = st.columns([3, 2])
            with col_table:
                st.dataframe(df, width="stretch", hide_index=True)
            with col_chart:
                st.bar_chart(df["Keyword"].value_counts().rename("Findings"))

        for result in batch.problem_files:
            _render_file(result)

    st.button("Clear", on_click=_reset)


batch: ScanBatch | None = st.session_state.get("last_batch")
if batch is not None:
    st.divider()
    _render_batch(batch)
