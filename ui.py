import argparse
import sys
import time

import pandas as pd
import streamlit as st

from meeting import Meeting
from models import SalaryCategory, ValidationError
from utils import (
    StorageError, format_cost, format_elapsed, load_categories, load_config,
    load_roster, save_categories, save_roster
)

# Arguments after `streamlit run ui.py --`
arg_parser = argparse.ArgumentParser()
arg_parser.add_argument('--config', default='config.yaml')
arg_parser.add_argument('--categories')
arg_parser.add_argument('--attendees')
args, _ = arg_parser.parse_known_args(sys.argv[1:])

try:
    config = load_config(args.config)
except StorageError as e:
    st.error(f"Error loading config: {e}")
    st.stop()

CATEGORIES_PATH = args.categories or config['categories_file']
CURRENCY = config['currency']

# Initialize session state
if "meeting" not in st.session_state:
    st.session_state["meeting"] = Meeting()
if "categories" not in st.session_state:
    try:
        st.session_state["categories"] = load_categories(CATEGORIES_PATH)
    except StorageError as e:
        st.error(f"Error loading categories: {e}")
        st.session_state["categories"] = []
if "attendees_path" not in st.session_state:
    st.session_state["attendees_path"] = args.attendees or config['attendees_file']

meeting = st.session_state["meeting"]
categories = st.session_state["categories"]

st.title("Meeting Cost Tracker")
if "notice" in st.session_state:
    st.info(st.session_state.pop("notice"))

# Live status
status_cols = st.columns(4)
status_cols[0].metric("Status", meeting.state.name.capitalize())
status_cols[1].metric("Elapsed", format_elapsed(meeting.elapsed()))
status_cols[2].metric("Cost", format_cost(meeting.total_cost(), CURRENCY))
status_cols[3].metric("Attendees", meeting.total_headcount())
st.caption(f"Burning {format_cost(meeting.combined_hourly_rate(), CURRENCY)} per hour")

# Timer controls
control_cols = st.columns(4)
if control_cols[0].button("▶️ Start", key="start", disabled=meeting.is_running):
    meeting.start()
    st.rerun()
if control_cols[1].button("⏸️ Stop", key="stop", disabled=not meeting.is_running):
    meeting.stop()
    st.rerun()
if control_cols[2].button("🔄 Reset timer", key="reset"):
    meeting.reset()
    st.rerun()
if control_cols[3].button("🧹 Clear attendees", key="clear_attendees"):
    meeting.clear_attendees()
    st.rerun()

# Attendees
st.subheader("Current Meeting")
with st.expander("Attendees", expanded=True):
    entries = meeting.attendees()
    if entries:
        attendees_df = pd.DataFrame([
            {
                "category": e.category.name,
                "count": e.count,
                "hourly_cost": format_cost(e.hourly_rate, CURRENCY),
            }
            for e in entries
        ])
        st.dataframe(attendees_df, use_container_width=True, hide_index=True)
    else:
        st.info("No attendees yet. Add some below.")

    category_names = [c.name for c in categories]
    att_cols = st.columns([4, 2, 1, 1])
    selected = att_cols[0].selectbox("Category", category_names, key="attendee_category")
    count = att_cols[1].number_input("Count", min_value=1, value=1, step=1, key="attendee_count")
    if att_cols[2].button("➕ Add", key="add_attendee", disabled=not category_names):
        category = next(c for c in categories if c.name == selected)
        try:
            meeting.add_attendee(category, int(count))
            st.rerun()
        except ValidationError as e:
            st.error(str(e))
    if att_cols[3].button("➖ Remove", key="remove_attendee", disabled=not category_names):
        meeting.remove_attendee(selected, int(count))
        st.rerun()

    file_cols = st.columns([4, 1, 1])
    attendees_path = file_cols[0].text_input("Attendee list file", st.session_state["attendees_path"])
    st.session_state["attendees_path"] = attendees_path
    if file_cols[1].button("💾 Save list", key="save_attendees"):
        try:
            save_roster(attendees_path, meeting)
            st.success(f"Attendee list saved to {attendees_path}")
        except StorageError as e:
            st.error(f"Error saving attendee list: {e}")
    if file_cols[2].button("📂 Load list", key="load_attendees"):
        try:
            skipped = meeting.load_attendees(categories, load_roster(attendees_path))
            for name in skipped:
                st.warning(f"Skipped unknown category: {name}")
            st.success(f"Loaded {meeting.total_headcount()} attendees from {attendees_path}")
        except StorageError as e:
            st.error(f"Error loading attendee list: {e}")

# Categories
st.subheader("Salary Categories")
with st.expander("Category Details", expanded=not categories):
    categories_df = pd.DataFrame(
        [c.to_dict() for c in categories],
        columns=["name", "annual_salary"],
    )
    edited_categories = st.data_editor(
        categories_df,
        num_rows="dynamic",
        use_container_width=True,
        hide_index=True,
        column_config={
            "name": st.column_config.TextColumn("Name", width="medium"),
            "annual_salary": st.column_config.NumberColumn("Annual Salary", min_value=0, format="%.2f"),
        },
        column_order=["name", "annual_salary"],
        key="edited_categories_df"
    )

    rows = [r for r in edited_categories.to_dict("records") if r.get("name")]
    names = [str(r["name"]).strip() for r in rows]
    duplicate_names = sorted({n for n in names if names.count(n) > 1})
    if duplicate_names:
        st.error(f"❌ Duplicate category names detected: {', '.join(duplicate_names)}. Please fix before saving.")

    if st.button("💾 Save Categories", key="save_categories", disabled=bool(duplicate_names)):
        try:
            new_categories = [
                SalaryCategory.create(r["name"], 0 if pd.isna(r["annual_salary"]) else r["annual_salary"])
                for r in rows
            ]
            save_categories(CATEGORIES_PATH, new_categories)
            st.session_state["categories"] = new_categories
            # attendees already in the meeting pick up the new salaries
            dropped = meeting.reprice(new_categories)
            if dropped:
                st.session_state["notice"] = f"Removed attendees of deleted categories: {', '.join(dropped)}"
            st.success("Categories saved!")
            st.rerun()
        except (ValidationError, StorageError) as e:
            st.error(f"Error saving categories: {e}")

# Redraw while the clock runs
if meeting.is_running:
    time.sleep(config['refresh_seconds'])
    st.rerun()
