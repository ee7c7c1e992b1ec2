import streamlit as st
from sheetflow.config import APP_TITLE, admin_password
from sheetflow.services.members import authenticate
from sheetflow.services.sheets import get_adapter


def render():
    st.title(APP_TITLE)
    st.subheader("Login")
    st.caption("Enter your credentials to access your account.")
    with st.form("form_login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login", use_container_width=True, type="primary")
    if not submitted:
        return
    with st.spinner("Checking credentials..."):
        result = authenticate(get_adapter(), username, password, admin_password())
    if not result:
        st.error(result.error)
        return
    st.session_state.user = result.data
    st.toast(f"Welcome, {result.data['name']}!")
    st.rerun()


def logout():
    for key in ["user", "board", "board_project"]:
        st.session_state.pop(key, None)
    st.rerun()
