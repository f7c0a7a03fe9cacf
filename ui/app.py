"""Streamlit UI for the SHN canvas - settings and session browser.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import httpx  # noqa: E402
import streamlit as st  # noqa: E402

from shn_canvas.config import DEFAULT_GEMINI_MODEL, get_settings  # noqa: E402
from ui.helpers import (  # noqa: E402
    build_session_rows,
    download_export,
    error_detail,
    fetch_settings,
    format_date,
    get_session_detail,
    list_sessions,
    run_extraction,
    save_settings,
)

BACKEND_URL = get_settings().backend_url

st.set_page_config(page_title="SHN Canvas", page_icon="📚", layout="wide")

if "sessions" not in st.session_state:
    st.session_state.sessions = []
if "selected" not in st.session_state:
    st.session_state.selected = None
if "error" not in st.session_state:
    st.session_state.error = None

st.title("📚 SHN Canvas")
st.caption(f"Backend: {BACKEND_URL}")

tab_sessions, tab_settings = st.tabs(["📂 세션", "⚙️ 설정"])

# =============================================================================
# SETTINGS TAB
# =============================================================================
with tab_settings:
    try:
        current = fetch_settings(BACKEND_URL)
    except httpx.HTTPError as e:
        current = {}
        st.error(f"❌ 설정 로드 실패: {e}")

    st.markdown(
        f"LLM: {'✅' if current.get('llm_configured') else '⚠️ 미설정'} · "
        f"Firestore: {'✅' if current.get('store_configured') else '⚠️ 미설정 (메모리 저장소 사용)'}"
    )

    with st.form("settings_form"):
        st.subheader("🧠 LLM")
        llm_api_key = st.text_input(
            "API Key", type="password", help=f"현재: {current.get('llm_api_key') or '-'} (비워두면 유지)"
        )
        llm_model = st.text_input("Model", value=current.get("llm_model") or DEFAULT_GEMINI_MODEL)

        st.subheader("🔥 Firestore")
        firebase_api_key = st.text_input(
            "Web API Key", type="password", help=f"현재: {current.get('firebase_api_key') or '-'} (비워두면 유지)"
        )
        firebase_project_id = st.text_input("Project ID", value=current.get("firebase_project_id", ""))
        firebase_auth_domain = st.text_input("Auth Domain", value=current.get("firebase_auth_domain", ""))

        if st.form_submit_button("💾 저장", type="primary"):
            try:
                save_settings(
                    BACKEND_URL,
                    llm_api_key=llm_api_key,
                    llm_model=llm_model,
                    firebase_api_key=firebase_api_key,
                    firebase_project_id=firebase_project_id,
                    firebase_auth_domain=firebase_auth_domain,
                )
                st.success("✅ 저장 완료")
            except httpx.HTTPStatusError as e:
                st.error(f"❌ {error_detail(e)}")
            except httpx.HTTPError as e:
                st.error(f"❌ {e}")

# =============================================================================
# SESSIONS TAB
# =============================================================================
with tab_sessions:
    col_list, col_detail = st.columns([1, 2])

    with col_list:
        st.subheader("세션 목록")
        if st.button("🔄 새로고침", use_container_width=True) or not st.session_state.sessions:
            try:
                st.session_state.sessions = list_sessions(BACKEND_URL)
                st.session_state.error = None
            except httpx.HTTPStatusError as e:
                st.session_state.error = error_detail(e)
            except httpx.HTTPError as e:
                st.session_state.error = str(e)

        sessions = st.session_state.sessions
        if st.session_state.error:
            st.error(f"❌ 로드 실패: {st.session_state.error}")
        elif not sessions:
            st.info("저장된 세션이 없습니다.")
        else:
            st.caption(f"{len(sessions)}개 세션")
            for session, row in zip(sessions, build_session_rows(sessions)):
                if st.button(row, key=f"session_{session['session_id']}", use_container_width=True):
                    st.session_state.selected = session["session_id"]

    with col_detail:
        session_id = st.session_state.selected
        if not session_id:
            st.info("👈 세션을 선택하세요.")
        else:
            try:
                detail = get_session_detail(BACKEND_URL, session_id)
            except httpx.HTTPStatusError as e:
                detail = None
                st.error(f"❌ {error_detail(e)}")
            except httpx.HTTPError as e:
                detail = None
                st.error(f"❌ {e}")

            if detail:
                session = detail["session"]
                extracted = detail.get("extractions", [])
                st.subheader(session["title"])
                st.caption(
                    f"{session['turn_count']} 턴 · 생성: {format_date(session.get('created_at'))}"
                    + (" · ✓ 추출됨" if extracted else "")
                )

                # --- EXPORT ---
                st.markdown("#### 📥 내보내기")
                col_raw, col_extracted = st.columns(2)
                with col_raw:
                    try:
                        raw_name, raw_bytes = download_export(BACKEND_URL, session_id, "raw")
                        st.download_button("📄 Raw JSON", raw_bytes, file_name=raw_name, mime="application/json")
                    except httpx.HTTPError as e:
                        st.error(f"❌ {e}")
                with col_extracted:
                    if extracted:
                        try:
                            ext_name, ext_bytes = download_export(BACKEND_URL, session_id, "extracted")
                            st.download_button(
                                "🧠 추출 데이터", ext_bytes, file_name=ext_name, mime="application/json"
                            )
                        except httpx.HTTPError as e:
                            st.error(f"❌ {e}")
                    else:
                        st.button("🧠 추출 데이터", disabled=True)
                        st.caption("LLM 추출을 먼저 실행하세요.")

                # --- EXTRACTION ---
                st.markdown("#### 🧠 데이터 정제 (Narrative Data Refiner)")
                with st.form("extraction_form"):
                    kind = st.selectbox("단위", options=["micro", "meso", "macro"], index=0)
                    batch_size = st.number_input("배치 크기", min_value=1, max_value=100, value=10, step=1)
                    if st.form_submit_button("🚀 추출 실행", type="primary"):
                        with st.spinner("추출 중..."):
                            try:
                                run = run_extraction(BACKEND_URL, session_id, kind, int(batch_size))
                                summary = f"{run['chunk_count']}개 청크, {run['batch_count']}개 배치"
                                if run.get("persist_error"):
                                    st.warning(f"⚠️ 추출 완료 (저장 실패): {run['persist_error']}")
                                    st.download_button(
                                        "💾 결과 다운로드",
                                        f"[{run['result']}]".encode("utf-8"),
                                        file_name=f"{session_id}_{kind}_refined.json",
                                        mime="application/json",
                                    )
                                else:
                                    st.success(f"✅ {summary} 완료")
                                st.code(run["result"], language="json")
                            except httpx.HTTPStatusError as e:
                                st.error(f"❌ {error_detail(e)}")
                            except httpx.HTTPError as e:
                                st.error(f"❌ {e}")

                # --- TURNS ---
                st.markdown(f"#### 턴 ({len(detail['turns'])})")
                for turn in detail["turns"]:
                    label = turn.get("scene_title") or turn.get("title") or ""
                    with st.expander(f"턴 {turn['turn_number']} {label}".strip()):
                        st.markdown(turn["content"])
