import streamlit as st
from sheetflow.config import PREDEFINED_TEAMS
from sheetflow.errors import SheetsError
from sheetflow.services.members import get_members, list_teams
from sheetflow.services.questions import (
    QUESTION_TYPES,
    add_form_question,
    add_ticket_field,
    build_question_text,
    delete_form_question,
    delete_ticket_field,
    get_form_questions,
    rename_ticket_field,
    ticket_fields,
    update_form_question,
)
from sheetflow.services.sheets import get_adapter


def _show(result, success):
    if result:
        st.toast(success)
        st.rerun()
    else:
        st.error(result.error)


def render():
    st.header("Form Questions")
    st.caption("Questions shown on the ticket form, per team.")
    adapter = get_adapter()
    try:
        teams = list_teams(get_members(adapter)) or PREDEFINED_TEAMS
        team = st.selectbox("Team", teams)
        questions = get_form_questions(adapter, team)
    except SheetsError as e:
        st.error(f"Failed to load questions from Google Sheet: {e}")
        return

    with st.form("form_question", clear_on_submit=True):
        st.subheader("Add Question")
        text = st.text_input("Question Text*", placeholder="Append * to make it required")
        c1, c2 = st.columns(2)
        question_type = c1.selectbox("Type", QUESTION_TYPES)
        options = c2.text_input("Options (Checkbox)", placeholder="separated by ;")
        submitted = st.form_submit_button("Add Question", use_container_width=True, type="primary")
    if submitted:
        final = build_question_text(text, question_type, options.split(";"))
        _show(add_form_question(adapter, team, final), "Question added")

    st.subheader(f"Questions for {team}")
    if not questions:
        st.info("No questions for this team yet.")
    for question in questions:
        with st.expander(f"{question.question_text}  ·  {question.question_type}"):
            new_text = st.text_input("Question Text", value=question.question_text, key=f"edit_{question.id}")
            c1, c2 = st.columns(2)
            if c1.button("Save", key=f"save_{question.id}", use_container_width=True):
                _show(update_form_question(adapter, team, question.question_text, new_text), "Question updated")
            if c2.button("🗑️ Delete", key=f"del_{question.id}", use_container_width=True):
                _show(delete_form_question(adapter, team, question.question_text), "Question deleted")

    st.divider()
    st.subheader("Ticket Columns")
    try:
        fields = ticket_fields(adapter)
    except SheetsError as e:
        st.error(f"Failed to load ticket columns: {e}")
        return
    st.code(", ".join(fields) or "(empty)")
    c1, c2, c3 = st.columns(3)
    with c1:
        new_field = st.text_input("New column")
        if st.button("Add Column", use_container_width=True):
            _show(add_ticket_field(adapter, new_field), "Column added")
    with c2:
        old = st.selectbox("Column", fields, key="rename_from") if fields else None
        renamed = st.text_input("New name")
        if st.button("Rename Column", use_container_width=True, disabled=not fields):
            _show(rename_ticket_field(adapter, old, renamed), "Column renamed")
    with c3:
        doomed = st.selectbox("Column", fields, key="delete_col") if fields else None
        confirm = st.checkbox("I understand the column data is lost")
        if st.button("Delete Column", use_container_width=True, disabled=not (fields and confirm)):
            _show(delete_ticket_field(adapter, doomed), "Column deleted")
