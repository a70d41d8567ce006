"""
Streamlit Grade Sync

Upload a gradebook CSV and an Excel template, map the CSV columns, and
download the template with weights, scores and failing grades filled in.
"""

import streamlit as st
import pandas as pd
import json
from datetime import date

from gradesync import (
    GRADE_SCALE,
    FieldMapping,
    GradeSyncError,
    ScoreConfig,
    TemplateLayout,
    build_preview_frame,
    calculate_statistics,
    extract_records,
    get_default_config,
    match_records,
    merge_config,
    read_headers,
    resolve_mapping,
    unmatched_records,
    validate_config,
    validate_mapping,
    validate_records,
    write_grades,
)


# Page configuration
st.set_page_config(
    page_title="Grade Sync",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="collapsed"
)

MAPPING_LABELS = {
    "id": "Student ID",
    "first_name": "First Name",
    "last_name": "Last Name",
    "daily": "Daily Total",
    "midterm": "Midterm Total",
    "final": "Final Total",
}


def init_session_state():
    """Initialize session state with default values."""
    if "config" not in st.session_state:
        st.session_state.config = get_default_config()

    if "mapping" not in st.session_state:
        st.session_state.mapping = FieldMapping()

    if "records" not in st.session_state:
        st.session_state.records = []

    if "match" not in st.session_state:
        st.session_state.match = None

    if "result" not in st.session_state:
        st.session_state.result = None


def config_to_json(config: dict) -> str:
    """Convert config dict to JSON string."""
    return json.dumps(config, indent=2)


def show_issues(issues: list[dict]):
    for issue in issues:
        if issue["type"] == "warning":
            st.warning(f"⚠️ {issue['message']}")
        else:
            st.error(f"❌ {issue['message']}")


def render_sidebar():
    """Render a minimal sidebar for quick config access."""
    st.sidebar.header("Quick Access")

    uploaded_config = st.sidebar.file_uploader(
        "Upload config JSON",
        type=["json"],
        key="sidebar_config_uploader",
        help="Weights, passing grade, column mapping and template layout"
    )

    if uploaded_config is not None:
        try:
            st.session_state.config = merge_config(json.load(uploaded_config))
            st.session_state.mapping = FieldMapping.from_dict(st.session_state.config["mapping"])
            st.sidebar.success("✓ Config loaded!")
        except json.JSONDecodeError:
            st.sidebar.error("Invalid JSON file")

    config = st.session_state.config
    config["mapping"] = st.session_state.mapping.as_dict()
    st.sidebar.download_button(
        "📥 Download Config",
        data=config_to_json(config),
        file_name="grade_sync_config.json",
        mime="application/json"
    )


def render_step1_upload():
    """Render Step 1: Upload files."""
    st.header("Step 1: Upload Files")

    col1, col2 = st.columns(2)
    with col1:
        csv_file = st.file_uploader("Gradebook export (CSV)", type=["csv"], key="csv_file")
    with col2:
        template_file = st.file_uploader("Excel template", type=["xlsx", "xlsm"], key="template_file")

    if csv_file is None or template_file is None:
        st.info("Upload both files to continue")
        return None, None, None

    csv_bytes = csv_file.getvalue()
    headers = read_headers(csv_bytes)
    if not headers:
        st.error("Failed to read CSV file.")
        return None, None, None

    # Suggest a mapping the first time a new CSV is seen
    if st.session_state.get("csv_name") != csv_file.name:
        st.session_state.csv_name = csv_file.name
        if not st.session_state.mapping.is_complete():
            st.session_state.mapping = resolve_mapping(headers)
        st.session_state.match = None
        st.session_state.result = None

    st.success(f"✓ {csv_file.name} ({len(headers)} columns) and {template_file.name} loaded")
    return csv_bytes, headers, template_file


def render_step2_configure(headers: list[str]):
    """Render Step 2: Column mapping, weights and passing grade."""
    st.header("Step 2: Configure")
    config = st.session_state.config

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Column Mapping")
        options = [""] + headers
        current = st.session_state.mapping.as_dict()
        selected = {}
        for field_name, label in MAPPING_LABELS.items():
            value = current.get(field_name, "")
            selected[field_name] = st.selectbox(
                label,
                options=options,
                index=options.index(value) if value in options else 0,
                key=f"map_{field_name}"
            )
        st.session_state.mapping = FieldMapping.from_dict(selected)
        show_issues(validate_mapping(st.session_state.mapping, headers))

    with col2:
        st.subheader("Weights (%)")
        weights = config["weights"]
        for name in ("daily", "midterm", "final"):
            weights[name] = st.number_input(
                name.title(),
                min_value=0.0,
                max_value=100.0,
                value=float(weights[name]),
                step=1.0,
                key=f"weight_{name}"
            )

        labels = [entry.label for entry in GRADE_SCALE if entry.minimum > 0]
        config["passing_grade"] = st.selectbox(
            "Minimum passing grade",
            options=labels,
            index=labels.index(config["passing_grade"]) if config["passing_grade"] in labels else len(labels) - 1,
            key="passing_grade"
        )

        issues = validate_config(config)
        show_issues(issues)
        if not issues:
            st.success("✓ Weights sum to 100%")


def render_step3_preview(csv_bytes: bytes, template_file):
    """Render Step 3: Match students and preview totals."""
    st.header("Step 3: Preview")
    config = st.session_state.config

    if st.button("🔍 Match Students", type="primary"):
        try:
            with st.spinner("Scanning template..."):
                records = extract_records(csv_bytes, st.session_state.mapping)
                match = match_records(
                    template_file.getvalue(),
                    records,
                    max_columns=int(config["matcher"]["max_columns"])
                )
            st.session_state.records = records
            st.session_state.match = match
            st.session_state.result = None
        except GradeSyncError as e:
            st.session_state.match = None
            st.error(str(e))

    match = st.session_state.match
    if match is None:
        st.info("Match students to see a preview")
        return

    score_config = ScoreConfig.from_config(config)
    records = st.session_state.records

    show_issues(validate_records(records))
    missing = unmatched_records(records, match)
    if missing:
        st.warning(f"⚠️ {len(missing)} of {len(records)} students were not found in any sheet")

    if not match.matches:
        st.error("No students matched in the template. Please check your IDs.")
        return

    with st.expander("Matching log"):
        for line in match.logs:
            st.text(line)

    stats = calculate_statistics(match.matches, score_config)
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Students", stats.count)
    c2.metric("Average", f"{stats.average:.1f}")
    c3.metric("Median", stats.median)
    c4.metric("Highest / Lowest", f"{stats.highest} / {stats.lowest}")
    c5.metric("Pass rate", f"{stats.pass_rate:.1f}%")

    col1, col2 = st.columns([2, 1])
    with col1:
        st.dataframe(build_preview_frame(match.matches, score_config), hide_index=True, use_container_width=True)
    with col2:
        distribution = pd.DataFrame(
            {"Students": list(stats.grade_distribution.values())},
            index=list(stats.grade_distribution.keys())
        )
        st.bar_chart(distribution)
        components = stats.component_averages
        st.caption(
            f"Component averages: daily {components['daily']:.1f}, "
            f"midterm {components['midterm']:.1f}, final {components['final']:.1f}"
        )


def render_step4_process(template_file):
    """Render Step 4: Write the workbook."""
    st.header("Step 4: Process")
    config = st.session_state.config
    match = st.session_state.match

    can_process = (
        match is not None
        and len(match.matches) > 0
        and not any(issue["type"] == "error" for issue in validate_config(config))
    )

    if st.button("🚀 Process Grades", disabled=not can_process, type="primary", use_container_width=True):
        with st.spinner("Writing grades..."):
            st.session_state.result = write_grades(
                template_file.getvalue(),
                match.matches,
                ScoreConfig.from_config(config),
                layout=TemplateLayout.from_config(config),
                keep_vba=template_file.name.lower().endswith(".xlsm")
            )

    result = st.session_state.result
    if result is None:
        if not can_process:
            st.info("Match students and fix configuration errors to enable processing")
        return

    with st.expander("Processing log"):
        for line in result.logs:
            st.text(line)

    if not result.success:
        st.error(result.message)
        return

    is_macro = template_file.name.lower().endswith(".xlsm")
    extension = ".xlsm" if is_macro else ".xlsx"
    st.download_button(
        "📥 Download Processed Workbook",
        data=result.output,
        file_name=config.get("output_file") or f"Processed_Grades_{date.today().isoformat()}{extension}",
        mime="application/vnd.ms-excel.sheet.macroEnabled.12" if is_macro
        else "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        type="primary",
        use_container_width=True
    )
    st.success(f"✓ {result.message}")


def main():
    """Main application entry point."""
    init_session_state()

    st.title("📊 Grade Sync")

    render_sidebar()

    csv_bytes, headers, template_file = render_step1_upload()
    if csv_bytes is None:
        return

    st.divider()
    render_step2_configure(headers)

    st.divider()
    render_step3_preview(csv_bytes, template_file)

    st.divider()
    render_step4_process(template_file)


if __name__ == "__main__":
    main()
