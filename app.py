# app.py — RiskViz dashboard: survey responses, CSV upload and risk charts
import json

import streamlit as st

from ai_helper import summarize_insights
from riskviz_dashboard.charts import color_scale_legend, dot_plot, risk_distribution, risk_heatmap, scatter_plot
from riskviz_dashboard.client import ApiClient
from riskviz_dashboard.colors import get_score_color, get_text_color
from riskviz_dashboard.helpers import build_matrix, count_risk_levels
from riskviz_dashboard.services.risk_service import hotspot_summaries

CATEGORIES = ["Health", "Security", "Environment", "Livelihood", "Infrastructure"]
TIMELINES = ["Phase 1", "Phase 2", "Phase 3", "Phase 4"]

st.set_page_config(page_title="RiskViz Dashboard", layout="wide")
st.title("📊 RiskViz Dashboard")

api = ApiClient()

# -----------------------
# Backend status
# -----------------------
status = api.check_health()
if status["ok"]:
    st.sidebar.success(f"Backend connected: {status.get('message', '')}")
else:
    st.sidebar.error(f"Backend unavailable: {status.get('error', 'unknown error')}")
st.sidebar.caption(f"API: {api.base_url}")

st.sidebar.markdown("**Risk scale**")
for entry in color_scale_legend():
    st.sidebar.markdown(
        f"<span style='background:{entry['color']};color:{get_text_color(entry['color'])};"
        f"padding:2px 8px;border-radius:4px'>{entry['value']} · {entry['label']}</span>",
        unsafe_allow_html=True,
    )

# -----------------------
# Upload
# -----------------------
st.markdown("## 1) Upload collected data")
uploaded_file = st.file_uploader("Upload risk data or x,y points (.csv)", type=["csv"])
if uploaded_file and st.button("⬆️ Upload file"):
    result = api.upload_csv(uploaded_file.name, uploaded_file.getvalue())
    if "error" in result:
        st.error(result["error"])
    else:
        st.success(result["message"])

# -----------------------
# Survey response form
# -----------------------
st.markdown("---")
st.markdown("## 2) Submit a survey response")
with st.form("response_form"):
    respondent_id = st.text_input("Respondent ID")
    location = st.text_input("Location")
    category = st.selectbox("Category", CATEGORIES)
    timeline = st.selectbox("Timeline", TIMELINES)
    answers_raw = st.text_area("Answers (JSON object)", value='{"q1": ""}')
    submitted = st.form_submit_button("💾 Submit response")

if submitted:
    try:
        answers = json.loads(answers_raw) if answers_raw.strip() else None
    except json.JSONDecodeError as e:
        st.error(f"Answers must be valid JSON: {e}")
    else:
        result = api.submit_response({
            "respondent_id": respondent_id,
            "location": location,
            "category": category,
            "timeline": timeline,
            "answers": answers,
        })
        if "error" in result:
            st.error(result["error"])
        else:
            st.success(f"✅ Response saved with id {result['id']}")

# -----------------------
# Stored risk data + charts
# -----------------------
df = api.fetch_risk_data()
st.markdown("---")
st.subheader("📋 Risk Data")
if not df.empty:
    st.dataframe(df, use_container_width=True)
    csv = df.to_csv(index=False).encode("utf-8")
    st.download_button("📥 Download CSV", data=csv, file_name="risk_data.csv", mime="text/csv")
    if st.button("🗑️ Clear risk data"):
        api.clear_risk_data()
        st.rerun()
else:
    st.warning("No risk data yet. Upload a CSV to populate the dashboard.")

if not df.empty:
    records = df.to_dict(orient="records")
    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(risk_heatmap(build_matrix(df)), use_container_width=True)
    with col2:
        st.plotly_chart(risk_distribution(count_risk_levels(records)), use_container_width=True)
    st.plotly_chart(dot_plot(records), use_container_width=True)

    summaries = hotspot_summaries(records)
    if summaries:
        st.subheader("📍 Hotspots")
        for summary in summaries:
            color = get_score_color(summary["score"])
            st.markdown(
                f"<span style='background:{color};color:{get_text_color(color)};padding:2px 8px;border-radius:4px'>"
                f"{summary['hotspot']} · {summary['score']:.1f} · {summary['label']}</span>",
                unsafe_allow_html=True,
            )
            st.caption(f"{summary['observation']} {summary['interpretation']}: {summary['recommendation']}")
            for observation in summary["observations"]:
                st.write(f"• {observation['text']}")

points = api.fetch_points()
if points:
    st.plotly_chart(scatter_plot(points), use_container_width=True)

# -----------------------
# Insights
# -----------------------
insights = api.fetch_insights()
if insights:
    st.markdown("---")
    st.subheader("🔎 Insights")
    for insight in insights:
        icon = "🔴" if insight["importance"] == "high" else "🟠"
        st.write(f"{icon} {insight['text']}")
    if st.button("🧠 Summarise insights"):
        context = f"{len(df)} risk records" if not df.empty else "no stored records"
        st.sidebar.info(summarize_insights(insights, context=context))
