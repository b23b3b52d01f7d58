from datetime import date, timedelta
from typing import Any, Dict, List

import pandas as pd
import streamlit as st

from logging_config import get_logger, setup_logging
from planner_core import (
    PlannerConfig,
    WEEKDAY_LABELS,
    build_plan_payload,
    collect_plan_input,
    run_planner,
)
from settings import get_settings


settings = get_settings()
setup_logging(settings.log_level, planner_mode=settings.planner_mode)
logger = get_logger(__name__)
config: PlannerConfig = settings.planner_config

st.set_page_config(page_title="Backyard Ultra Training Planner", layout="wide")
st.title("Backyard Ultra Training Planner")
st.caption("Placeholder weekly hours plan leading up to your backyard ultra.")

with st.expander("How to use this planner"):
    st.markdown(
        "1. Pick the date of your target backyard ultra.\n"
        f"2. Choose a plan length ({', '.join(str(n) for n in config.plan_lengths)} weeks).\n"
        "3. Enter your average weekly training hours"
        + (" and the peak week you want to reach.\n" if config.checks_peak else ".\n")
        + "4. Tick the days you can train and press **Generate plan**."
    )
    if not config.two_tier:
        st.markdown(
            f"Plans need at least {config.min_avg_hours:g} hours a week, "
            f"{config.min_training_days} training days and one of "
            f"{', '.join(config.long_run_days)} for the long run."
        )

default_target = date.today() + timedelta(weeks=16)

with st.sidebar:
    st.header("Plan inputs")
    target_date = st.date_input("Target race date", value=default_target)
    plan_length = st.selectbox("Plan length (weeks)", ["", *config.plan_lengths], index=0)
    avg_hours = st.text_input("Average weekly hours", value="")
    peak_hours = st.text_input("Peak weekly hours", value="") if config.checks_peak else None
    st.markdown("**Training days**")
    day_columns = st.columns(len(WEEKDAY_LABELS))
    selected_days = [
        label
        for label, column in zip(WEEKDAY_LABELS, day_columns)
        if column.checkbox(label, key=f"day_{label}")
    ]
    generate = st.button("Generate plan")


def render_summary(summary: Dict[str, Any]) -> None:
    st.subheader("Plan summary")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Target race", summary["target_date"])
    col2.metric("Plan start", summary["start_date"], f"{summary['plan_length_weeks']} weeks")
    col3.metric("Total hours", f"{summary['total_hours']:.1f} h")
    peak_week = summary["peak_week_number"] or "-"
    col4.metric("Peak week", peak_week)
    hours = f"{summary['avg_hours']:g}"
    if summary["peak_hours"] is not None:
        hours += f" / {summary['peak_hours']:g}"
    st.markdown(f"- Training days selected: {summary['training_days']}")
    st.markdown(f"- Avg{' / Peak' if summary['peak_hours'] is not None else ''} weekly hours: {hours}")


def render_table(weeks: List[Dict[str, Any]]) -> None:
    st.subheader("Weekly hours")
    table_df = pd.DataFrame(
        [
            {
                "Week": f"Week {week['week_number']}",
                "Starts": week["week_start"],
                "Planned hours": week["planned_hours"],
            }
            for week in weeks
        ]
    )
    st.dataframe(table_df, use_container_width=True, hide_index=True)
    st.bar_chart(table_df.set_index("Week")["Planned hours"])


if generate:
    try:
        record = collect_plan_input(
            target_date=target_date,
            plan_length=plan_length,
            avg_hours=avg_hours,
            peak_hours=peak_hours,
            selected_days=selected_days,
        )
        outcome = run_planner(record, config)
    except ValueError as err:
        logger.exception("plan generation failed")
        st.error(f"Please check your inputs: {err}")
    else:
        if outcome.errors:
            st.error("\n".join(f"- {message}" for message in outcome.errors))
        else:
            plan = build_plan_payload(record, outcome.schedule, config)
            render_summary(plan["summary"])
            render_table(plan["weeks"])
            for note in plan["notes"]:
                st.caption(note)
else:
    st.info("Fill in the sidebar and press 'Generate plan'.")
