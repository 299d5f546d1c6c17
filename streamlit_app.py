# streamlit_app.py – Teacher Training Plan Generator
# Describe a training need, generate a plan with Gemini, copy or download it as PDF.

import asyncio
import sys
from pathlib import Path

# make src/ importable without installing the package
sys.path.insert(0, str(Path(__file__).parent / "src"))

import streamlit as st

from train_plan.b3_pdf_exporter import DEFAULT_FILENAME
from train_plan.config import get_settings
from train_plan.errors import ExportError
from train_plan.generation import GenerationResult, build_controller
from train_plan.guardrails import GuardrailLevel
from train_plan.models import (
    DEFAULT_DURATION_MINUTES,
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    QUICK_TEMPLATES,
    SUBJECTS,
    FreeformPlanRequest,
    PlanRequest,
    StructuredPlanRequest,
    get_quick_template,
)

# Color constants
BLUE         = "#0078D4"
PURPLE       = "#7B2FF2"
TEXT_MUTED   = "#616161"
BORDER       = "#E1DFDD"

# ─── Page config ─────────────────────────────────────────────────────────────
st.set_page_config(
    page_title="Teacher Training Plan Generator",
    page_icon="🍎",
    layout="wide",
    initial_sidebar_state="expanded",
)

settings = get_settings()

# One controller per browser session; it restores the persisted draft.
if "controller" not in st.session_state:
    st.session_state["controller"] = build_controller(settings)
    st.session_state["generating"] = False
    st.session_state["last_result"] = None

controller = st.session_state["controller"]


def _run_generation(request: PlanRequest) -> None:
    st.session_state["generating"] = True
    try:
        with st.spinner("Generating your training plan…"):
            result = asyncio.run(controller.submit(request))
    finally:
        st.session_state["generating"] = False
    st.session_state["last_result"] = result


def _show_feedback(result: GenerationResult) -> None:
    if result.ok:
        st.success(result.message)
        for v in result.advisories:
            icon = "⚠️" if v.level == GuardrailLevel.WARN else "ℹ️"
            st.caption(f"{icon} [{v.code}] {v.message}")
    elif result.message:
        st.error(result.message)


# ─── Sidebar ─────────────────────────────────────────────────────────────────
with st.sidebar:
    st.markdown(f"""
    <div style="text-align:center;padding:12px 0 12px;">
      <div style="font-size:1.8rem;line-height:1;">🍎</div>
      <div style="color:{PURPLE};font-size:1.1rem;font-weight:700;margin-top:6px;">Training Plan Generator</div>
      <div style="color:{TEXT_MUTED};font-size:0.7rem;margin-top:2px;">Powered by Gemini</div>
    </div>
    """, unsafe_allow_html=True)
    st.markdown("---")
    for label, value in settings.status_summary().items():
        st.markdown(f"**{label}:** {value}")
    st.markdown("---")
    if st.button("🗑️ Clear current plan", width="stretch",
                 disabled=st.session_state["generating"] or not controller.current_plan):
        controller.clear_plan()
        st.session_state["last_result"] = None
        st.rerun()


# ─── Header ──────────────────────────────────────────────────────────────────
st.markdown(f"""
<div style="border-bottom:2px solid {BORDER};padding-bottom:8px;margin-bottom:16px;">
  <h1 style="color:{BLUE};margin:0;">Create Your Training Plan</h1>
  <p style="color:{TEXT_MUTED};margin:4px 0 0;">
    Describe your needs, start from a template, or fill in the details.
  </p>
</div>
""", unsafe_allow_html=True)

tab_templates, tab_custom, tab_describe = st.tabs([
    "⚡ Quick Templates", "📝 Custom Plan", "💬 Describe Needs",
])
_busy = st.session_state["generating"]

# ── Tab 1: Quick templates ───────────────────────────────────────────────────
with tab_templates:
    _cols = st.columns(len(QUICK_TEMPLATES))
    for col, (template_id, tpl) in zip(_cols, QUICK_TEMPLATES.items()):
        with col:
            st.markdown(f"**{tpl['label']}**")
            st.caption(tpl["description"])
            if st.button("Use this template", key=f"tpl_{template_id}",
                         disabled=_busy, width="stretch"):
                _run_generation(get_quick_template(template_id))

# ── Tab 2: Structured form ───────────────────────────────────────────────────
with tab_custom:
    with st.form("plan_form", clear_on_submit=False):
        _left, _right = st.columns(2, gap="small")
        with _left:
            title = st.text_input("Training Title *")
            _subject_labels = ["—"] + [s["label"] for s in SUBJECTS]
            _subject_pick = st.selectbox("Subject Area", options=_subject_labels)
            teaching_level = st.text_input("Teaching Level", placeholder="e.g. Middle School")
        with _right:
            duration = st.slider(
                "Duration (minutes)",
                min_value=MIN_DURATION_MINUTES,
                max_value=MAX_DURATION_MINUTES,
                value=DEFAULT_DURATION_MINUTES,
                step=15,
            )
            objectives = st.text_area("Learning Objectives *",
                                      placeholder="What should teachers learn from this training?")
            notes = st.text_area("Additional Notes")
        submitted = st.form_submit_button(
            "🎯 Generate Training Plan",
            type="primary",
            width="stretch",
            disabled=_busy,
        )

    if submitted:
        subject = next((s["value"] for s in SUBJECTS if s["label"] == _subject_pick), "")
        _run_generation(StructuredPlanRequest(
            title            = title.strip(),
            objectives       = objectives.strip(),
            subject          = subject,
            teaching_level   = teaching_level.strip(),
            duration_minutes = duration,
            additional_notes = notes.strip(),
        ))

# ── Tab 3: Free-text description ─────────────────────────────────────────────
with tab_describe:
    with st.form("describe_form", clear_on_submit=False):
        needs = st.text_area(
            "Describe your training needs",
            placeholder="e.g. A workshop on project-based learning for high school science teachers",
            height=140,
        )
        described = st.form_submit_button(
            "✨ Generate Training Plan", type="primary",
            width="stretch", disabled=_busy,
        )
    if described:
        _run_generation(FreeformPlanRequest(prompt=needs.strip()))


# ─── Result ──────────────────────────────────────────────────────────────────
if st.session_state["last_result"] is not None:
    _show_feedback(st.session_state["last_result"])

plan = controller.current_plan
if plan:
    st.markdown("---")
    st.subheader("📋 Your Training Plan")
    st.markdown(plan)

    with st.expander("📋 Copy as text"):
        st.code(controller.copy_text(), language="markdown")

    try:
        _pdf = controller.pdf_bytes()
    except ExportError as exc:
        st.error(f"{exc.user_message} {exc}")
    else:
        st.download_button(
            label="⬇️ Download PDF",
            data=_pdf,
            file_name=DEFAULT_FILENAME,
            mime="application/pdf",
            width="stretch",
        )
