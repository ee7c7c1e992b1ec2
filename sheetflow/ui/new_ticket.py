from datetime import date
import streamlit as st
from sheetflow.errors import SheetsError
from sheetflow.services.members import get_members, list_teams
from sheetflow.services.questions import get_form_questions, is_required, question_label, select_options
from sheetflow.services.sheets import get_adapter
from sheetflow.services.tickets import submit_ticket, ticket_record


def _field(adapter, question, key):
    label = question_label(question.question_text)
    if is_required(question.question_text):
        label += " *"
    if question.question_type == "Textarea":
        return st.text_area(label, key=key, height=120)
    if question.question_type == "Select":
        try:
            options = select_options(adapter, question.question_text)
        except SheetsError as e:
            st.warning(f"Could not load options for {label}: {e}")
            options = []
        return st.selectbox(label, options, key=key) or ""
    if question.question_type == "Checkbox":
        return ", ".join(o for o in question.options if st.checkbox(o, key=f"{key}_{o}"))
    if question.question_type == "Date":
        value = st.date_input(label, value=date.today(), key=key)
        return value.strftime("%Y-%m-%d")
    return st.text_input(label, key=key, placeholder=f"Enter {question_label(question.question_text).lower()}")


def render():
    st.header("Submit a New Ticket")
    adapter = get_adapter()
    if "ticket_submitted" not in st.session_state:
        st.session_state.ticket_submitted = None
    if st.session_state.ticket_submitted is not None:
        st.success(f"Ticket **{st.session_state.ticket_submitted['Ticket ID']}** submitted!")
        if st.button("Submit Another Ticket", type="primary"):
            st.session_state.ticket_submitted = None
            st.rerun()
        st.divider()

    try:
        teams = list_teams(get_members(adapter))
    except SheetsError as e:
        st.error(f"Failed to load teams: {e}")
        return
    if not teams:
        st.info("No teams configured yet. Ask an admin to add members.")
        return
    user = st.session_state.get("user", {})
    default = teams.index(user["team"]) if user.get("team") in teams else 0
    c1, c2 = st.columns(2)
    selected_teams = c1.multiselect("Team(s)*", teams, default=[teams[default]])
    work_type = c2.selectbox("Work Type*", ["Request", "Bug", "Feature Request", "Question"])

    questions = []
    for team in selected_teams:
        try:
            questions.extend(q for q in get_form_questions(adapter, team) if q.question_text not in
                             [x.question_text for x in questions])
        except SheetsError as e:
            st.warning(f"Could not load questions for {team}: {e}")

    with st.form("form_new_ticket", clear_on_submit=True):
        name = st.text_input("Your Name*", value=user.get("name", "") if user.get("role") == "member" else "")
        answers = {q.question_text: _field(adapter, q, f"q_{q.id}") for q in questions}
        submitted = st.form_submit_button("Submit Ticket", use_container_width=True, type="primary")
    if not submitted:
        return
    if not selected_teams:
        st.error("Select at least one team.")
        st.stop()
    if not name.strip():
        st.error("Name is required.")
        st.stop()
    missing = [question_label(q) for q, a in answers.items() if is_required(q) and not str(a).strip()]
    if missing:
        st.error(f"Required fields: {', '.join(missing)}")
        st.stop()
    data = ticket_record(name, selected_teams, work_type, answers)
    with st.spinner("Saving..."):
        result = submit_ticket(adapter, data)
    if result:
        st.session_state.ticket_submitted = result.data
        st.balloons()
        st.rerun()
    else:
        st.error(f"Failed to submit ticket: {result.error}")
