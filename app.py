# app.py: ClearWater UI: ZIP -> pick a water system -> graded report
# - One WaterQualityService per process (st.cache_resource); its TTL cache
#   holds geocodes, per-ZIP system lists and per-system reports for 24h
# - Reports download as Word or JSON

import json

import streamlit as st

from clearwater.codes import SOURCE_TYPES, US_STATES
from clearwater.config import setup_logging
from clearwater.docx_report import report_bytes
from clearwater.errors import InvalidInputError
from clearwater.insights import lead_copper_summary, recommendations, violation_stats
from clearwater.service import WaterQualityService
from clearwater.tables import samples_frame, system_summary, systems_frame, violations_frame

st.set_page_config(page_title="ClearWater: Tap Water Quality", layout="centered")
st.title("ClearWater: Tap Water Quality")
st.write("Enter a ZIP code to find your water utility, then see its EPA violation history, "
         "lead & copper results and a safety grade.")

GRADE_COLORS = {"A": "#22c55e", "B": "#84cc16", "C": "#f59e0b", "D": "#f97316", "F": "#ef4444"}


@st.cache_resource
def get_service() -> WaterQualityService:
    setup_logging()
    return WaterQualityService()


service = get_service()

# ---------------- Browse by state ----------------

with st.sidebar:
    st.subheader("Browse by state")
    state = st.selectbox("State", [""] + sorted(US_STATES), format_func=lambda s: US_STATES.get(s, "-"))
    if state:
        with st.spinner(f"Loading water systems in {US_STATES[state]}…"):
            largest = service.systems_for_state(state)
        if largest:
            st.dataframe(systems_frame(largest)[["PWSID", "Name", "City", "Population"]],
                         hide_index=True, use_container_width=True)
        else:
            st.write("No systems found.")

# ---------------- Search ----------------

zip_code = st.text_input("ZIP code", max_chars=5, placeholder="10001")
if st.button("Find my water"):
    try:
        with st.spinner(f"Looking up water systems near {zip_code}…"):
            st.session_state.systems = service.systems_for_zip(zip_code)
    except InvalidInputError as e:
        st.error(e.message)
        st.session_state.systems = None

systems = st.session_state.get("systems")
pwsid = None
if systems is not None:
    if not systems:
        st.warning("No water systems found for that ZIP code.")
    else:
        st.subheader("Water systems")
        st.dataframe(systems_frame(systems), hide_index=True, use_container_width=True)
        labels = {f"{s.name} ({s.pwsid})": s.pwsid for s in systems}
        pwsid = labels[st.selectbox("Select your system", list(labels))]

# ---------------- Report ----------------

if pwsid:
    with st.spinner(f"Fetching EPA data for {pwsid}…"):
        report = service.report(pwsid)

    if report.system is None:
        st.error(f"No EPA record found for {pwsid}.")
        st.stop()

    grade = service.grade(report)
    stats = violation_stats(report.violations)
    color = GRADE_COLORS.get(grade.letter, "#64748b")

    st.header(report.system.name)
    st.markdown(
        f"<div style='display:inline-flex;gap:12px;align-items:center;padding:12px 20px;"
        f"border:3px solid {color};border-radius:12px'>"
        f"<span style='font-size:2.5rem;font-weight:800;color:{color}'>{grade.letter}</span>"
        f"<span>{grade.label}</span></div>",
        unsafe_allow_html=True,
    )

    c1, c2, c3 = st.columns(3)
    c1.metric("Total violations", stats["total"])
    c2.metric("Active", stats["active"])
    c3.metric("Active health-based", stats["activeHealth"])

    tab_info, tab_vio, tab_lead, tab_recs = st.tabs(["System", "Violations", "Lead & Copper", "What to do"])

    with tab_info:
        for label, value in system_summary(report.system).items():
            st.write(f"**{label}:** {value}")
        source = SOURCE_TYPES.get(report.system.source_type)
        if source:
            st.caption(f"Water source: {source}")

    with tab_vio:
        vio = violations_frame(report.violations)
        if vio.empty:
            st.success("No violations on record.")
        else:
            st.dataframe(vio, hide_index=True, use_container_width=True)

    with tab_lead:
        st.caption("Lead in water often comes from your home's own pipes and fixtures, "
                   "not the water source itself. Older homes (pre-1986) are at greater risk.")
        for summary in lead_copper_summary(report.samples).values():
            st.subheader(summary.name)
            if not summary.samples:
                st.write(f"No {summary.name.lower()} sample data available.")
                continue
            st.write(f"Action level {summary.action_level:g} mg/L · "
                     f"{summary.over_action_level} of {summary.total} samples above it")
            st.dataframe(samples_frame(summary.samples, summary.name), hide_index=True,
                         use_container_width=True)

    with tab_recs:
        for rec in recommendations(report.violations, report.samples):
            box = st.error if rec.priority else (st.success if rec.good else st.info)
            box(f"**{rec.title}**\n\n{rec.desc}")

    col1, col2 = st.columns(2)
    col1.download_button(
        "Download Word report",
        data=report_bytes(report),
        file_name=f"{report.pwsid}_Water_Report.docx",
        mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    )
    col2.download_button(
        "Download JSON",
        data=json.dumps(report.to_dict(grade), indent=2),
        file_name=f"{report.pwsid}.json",
        mime="application/json",
    )

with st.expander("Developer tools"):
    if st.button("Clear app cache"):
        service.cache.clear()
        st.success("Cache cleared. Next search will refetch.")
