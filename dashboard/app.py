"""
Benchmark Insights Dashboard
Run with: streamlit run dashboard/app.py
"""

import sys
import os
import logging
from pathlib import Path
from typing import Dict, Optional

import streamlit as st
import yaml

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from insights.comparison import compare_assessments
from insights.dataset import Dataset
from insights.engine import AnalyticsEngine
from insights.errors import AnalyticsError
from insights.export_client import ExportClient, MockExportClient, load_dataset_file, parse_export, parse_metadata
from insights.heatmap import ALL_TEACHERS_LABEL, cell_value
from insights.settings import ReportOptions, Settings, load_settings_file
from insights.store import results
from dashboard.components import (
    inject_css,
    metric_card,
    section_header,
    standard_tags,
    score_heatmap,
    standard_bar_chart,
    delta_bar_chart,
    item_table,
    group_card,
    summary_table,
    CATEGORY_COLORS,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="Benchmark Insights",
    layout="wide",
    initial_sidebar_state="expanded",
)

inject_css()


@st.cache_resource
def load_catalog() -> Dict:
    with open(ROOT / "config" / "reports.yaml", "r") as f:
        return yaml.safe_load(f)


@st.cache_resource
def default_settings() -> Settings:
    return load_settings_file(ROOT / "config" / "settings.yaml")


catalog = load_catalog()
defaults = default_settings()


def get_client(endpoint: str, token: str, use_mock: bool) -> ExportClient:
    if use_mock:
        return MockExportClient()
    return ExportClient(endpoint=endpoint, token=token)


def load(client: ExportClient, assessment_id: str, upload, local_path: str = "") -> Optional[Dataset]:
    try:
        if local_path:
            return load_dataset_file(local_path)
        if upload is not None:
            text = upload.getvalue().decode("utf-8-sig")
            return parse_export(text, assessment_id=Path(upload.name).stem)
        if assessment_id:
            return client.load_dataset(assessment_id)
    except AnalyticsError as e:
        st.error(str(e))
    return None


def load_metadata(client: ExportClient, dataset: Dataset, upload, from_service: bool) -> Dict:
    """Uploaded metadata wins; otherwise ask the provider for the assessment it served."""
    try:
        if upload is not None:
            return parse_metadata(upload.getvalue().decode("utf-8-sig"), dataset.assessment_id)
        if from_service:
            return client.standard_metadata(dataset.assessment_id)
    except AnalyticsError as e:
        st.warning(f"Standard metadata unavailable: {e}")
    return {}


# ─────────────────────────────────────────────────────────────────────────────
# SIDEBAR
# ─────────────────────────────────────────────────────────────────────────────

with st.sidebar:
    st.markdown("""
    <div style="margin-bottom:20px;padding-bottom:16px;border-bottom:1px solid #1E2235;">
        <div style="font-size:16px;font-weight:700;color:#E8EAF6;">Benchmark Insights</div>
        <div style="font-size:11px;color:#4A5068;">Instructional Analytics</div>
    </div>
    """, unsafe_allow_html=True)

    st.markdown("#### Data Source")
    use_mock = st.toggle("Use Mock / Demo Data", value=True)
    if not use_mock:
        endpoint = st.text_input("Assessment service", value=os.getenv("BENCHMARK_API_ENDPOINT", ""))
        token = st.text_input("Bearer Token", type="password", value=os.getenv("BENCHMARK_API_TOKEN", ""))
    else:
        endpoint = token = ""

    assessment_id = st.text_input("Assessment ID", value="fall-benchmark" if use_mock else "")
    upload = st.file_uploader("…or upload an export CSV", type=["csv"])
    local_path = st.text_input("…or read an export file on the server", value="")

    st.divider()
    st.markdown("#### Thresholds")
    growth = st.slider("Growth below (%)", 0, 100, int(defaults.growth_threshold))
    strength = st.slider("Strength at or above (%)", 0, 100, int(defaults.strength_threshold))
    weakness = st.slider("Weak standard below (%)", 0, 100, int(defaults.group_weakness_threshold))
    min_size, max_size = st.slider("Group size", 1, 10, (defaults.group_min_size, defaults.group_max_size))

    st.divider()
    st.markdown("#### Reports")
    selected = {}
    for key, report in catalog["reports"].items():
        if not report.get("optional"):
            continue
        selected[key] = st.checkbox(report["label"], value=key != "format_sections", key=f"rep_{key}")

    format_labels = {f["label"]: f["key"] for f in catalog["data_formats"]}
    data_format = format_labels[st.selectbox("Data format", list(format_labels))] or None
    metadata_upload = st.file_uploader("Standard metadata (YAML or JSON)", type=["yaml", "yml", "json"])

    st.divider()
    st.markdown("#### Compare")
    compare_id = st.text_input("Second assessment ID", value="spring-benchmark" if use_mock else "")
    compare_upload = st.file_uploader("…or upload a second export", type=["csv"], key="cmp_upload")

    st.divider()
    stats = results.stats()
    st.caption(f"{stats['assessments']} stored result sets · {stats['backend']}")
    if st.button("Clear stored results", use_container_width=True):
        results.clear_all()
        st.rerun()


# ─────────────────────────────────────────────────────────────────────────────
# MAIN — Analyze
# ─────────────────────────────────────────────────────────────────────────────

try:
    settings = Settings(
        growth_threshold=growth,
        strength_threshold=strength,
        group_weakness_threshold=weakness,
        group_min_size=min_size,
        group_max_size=max_size,
    )
except AnalyticsError as e:
    st.error(str(e))
    st.stop()

client = get_client(endpoint, token, use_mock)
dataset = load(client, assessment_id, upload, local_path.strip())
if dataset is None:
    st.info("Choose an assessment or upload an export to begin.")
    st.stop()

options = ReportOptions.from_mapping(selected)
from_service = not local_path.strip() and upload is None
metadata = load_metadata(client, dataset, metadata_upload, from_service) if data_format else {}

with st.spinner("Analyzing…"):
    try:
        bundle = AnalyticsEngine(settings).analyze(dataset, options, data_format, metadata)
    except AnalyticsError as e:
        st.error(f"Analysis failed: {e}")
        st.stop()
    results.store(dataset.assessment_id, bundle)

reports = catalog["reports"]

# ─────────────────────────────────────────────────────────────────────────────
# HEADER
# ─────────────────────────────────────────────────────────────────────────────

st.markdown(f"""
<div style="margin-bottom: 4px;">
    <span style="font-size: 28px; font-weight: 800; color: #E8EAF6;">{dataset.assessment_id}</span>
</div>
<div style="font-size: 12px; color: #4A5068; margin-bottom: 16px;">Generated {bundle['generated_at']}</div>
""", unsafe_allow_html=True)

summaries = bundle["teacher_summaries"]
cols = st.columns(4)
with cols[0]:
    metric_card("Students", sum(t["student_count"] for t in summaries))
with cols[1]:
    metric_card("Teachers", len(summaries))
with cols[2]:
    metric_card("Standards", len(bundle["standards"]))
with cols[3]:
    district = bundle.get("district_summary")
    metric_card("District Average", district["overall_average"] if district else None, "%",
                "Mean of teacher averages")

st.download_button(
    "Download report (JSON)",
    data=results.export_json(dataset.assessment_id) or "{}",
    file_name=f"{dataset.assessment_id or 'report'}.json",
    mime="application/json",
)

# ─────────────────────────────────────────────────────────────────────────────
# SECTIONS
# ─────────────────────────────────────────────────────────────────────────────

if "district_summary" in bundle:
    section_header(reports["district"]["label"], reports["district"]["description"], reports["district"]["color"])
    st.dataframe(bundle["district_summary"]["teachers"], use_container_width=True, hide_index=True)
    standard_bar_chart(bundle["district_summary"]["standards"], title="District standards")

section_header(reports["teacher_summaries"]["label"], reports["teacher_summaries"]["description"],
               reports["teacher_summaries"]["color"])
teacher_names = [t["teacher"] for t in summaries]
teacher = st.selectbox("Teacher", teacher_names) if teacher_names else None
summary = next((t for t in summaries if t["teacher"] == teacher), None)
if summary:
    c1, c2, c3 = st.columns(3)
    with c1:
        metric_card("Average", summary["average"], "%", f"{summary['total_correct']}/{summary['total_answered']} correct")
    with c2:
        metric_card("Weakest", summary["worst_sol"])
    with c3:
        metric_card("Strongest", summary["best_sol"])
    for bucket in ("growth", "monitor", "strength"):
        st.markdown(f"**{bucket.title()}**")
        standard_tags(summary[bucket], color=CATEGORY_COLORS[bucket])
    standard_bar_chart(summary["standards"])
    summary_table(summary["standards"])

if "item_analysis" in bundle and teacher in bundle["item_analysis"]:
    section_header(reports["item_analysis"]["label"], reports["item_analysis"]["description"],
                   reports["item_analysis"]["color"])
    st.caption("Keys are inferred from the first student marked correct, not from an answer key.")
    item_table(bundle["item_analysis"][teacher])

if "groups" in bundle:
    section_header(reports["groups"]["label"], reports["groups"]["description"], reports["groups"]["color"])
    teacher_groups = [g for g in bundle["groups"] if g["teacher"] == teacher]
    if not teacher_groups:
        st.caption("No students below the weakness threshold")
    for g in teacher_groups:
        group_card(g)

if "heatmaps" in bundle:
    section_header(reports["heatmaps"]["label"], reports["heatmaps"]["description"], reports["heatmaps"]["color"])
    sq = bundle["heatmaps"]["student_question"]
    student_rows = [r for r in sq["rows"][:-1] if r["teacher"] == teacher]
    average_row = sq["rows"][-1]
    # student cells are 1/0, the average row is already a percentage
    z = [[None if v is None else v * 100 for v in r["question_scores"]] for r in student_rows]
    z.append(average_row["question_scores"])
    score_heatmap(z, [f"Q{q['number']}" for q in sq["questions"]],
                  [r["name"] for r in student_rows] + [average_row["name"]], title="Students × questions")
    ts = bundle["heatmaps"]["teacher_standard"]
    score_heatmap([r["values"] for r in ts["rows"]], ts["standards"], [r["teacher"] for r in ts["rows"]],
                  title="Teachers × standards")
    if teacher and ts["standards"]:
        code = st.selectbox("Standard", ts["standards"], key="hm_standard")
        c1, c2 = st.columns(2)
        with c1:
            metric_card(teacher, cell_value(ts, teacher, code), "%", code)
        with c2:
            metric_card(ALL_TEACHERS_LABEL, cell_value(ts, ALL_TEACHERS_LABEL, code), "%", code)

if "format_sections" in bundle:
    fs = bundle["format_sections"]
    section_header(reports["format_sections"]["label"], reports["format_sections"]["description"],
                   reports["format_sections"]["color"])
    if fs["format"] == "standard_detail":
        st.dataframe(fs["standards"], use_container_width=True, hide_index=True)
        st.dataframe(fs["items"], use_container_width=True, hide_index=True)
        st.dataframe(fs["categories"], use_container_width=True, hide_index=True)
    else:
        st.dataframe(fs["student_scores"], use_container_width=True, hide_index=True)
        st.json(fs["difficulty_breakdown"]["totals"])

# ─────────────────────────────────────────────────────────────────────────────
# COMPARISON
# ─────────────────────────────────────────────────────────────────────────────

other = load(client, compare_id, compare_upload) if (compare_id or compare_upload) else None
if other is not None:
    section_header("Assessment Comparison", f"{dataset.assessment_id} → {other.assessment_id}", "#22C55E")
    try:
        comparison = compare_assessments(dataset, other, settings)
    except AnalyticsError as e:
        st.error(f"Comparison failed: {e}")
    else:
        overall = comparison["overall"]
        c1, c2, c3 = st.columns(3)
        with c1:
            metric_card("Before", overall["before"], "%")
        with c2:
            metric_card("After", overall["after"], "%")
        with c3:
            metric_card("Change", overall["delta"], "pts")
        delta_bar_chart([t["teacher"] for t in comparison["teachers"]],
                        [t["average_delta"] for t in comparison["teachers"]], title="Change by teacher")
        st.dataframe(comparison["student_comparisons"][:25], use_container_width=True, hide_index=True)
