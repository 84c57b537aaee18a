import streamlit as st

from models import Role
from state import AppState

ROLE_CHOICES = [r.value for r in Role]


def _role_picker(key: str) -> str:
    return st.radio(
        "I am a",
        ROLE_CHOICES,
        format_func=lambda v: Role(v).label,
        horizontal=True,
        key=key,
    )


def _go_to_dashboard(app: AppState) -> None:
    st.session_state.current_page = app.session.role.dashboard
    st.rerun()


def render_login(app: AppState):
    st.markdown("### Sign in")

    with st.form("login_form"):
        role = _role_picker("login_role")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary", use_container_width=True)

    if submitted:
        with st.spinner("Signing in..."):
            user = app.session.login(email, password, role)
        if user:
            st.success(f"Welcome back, {user.name}!")
            _go_to_dashboard(app)

    if app.session.error:
        st.error(app.session.error)


def render_register(app: AppState):
    st.markdown("### Create an account")

    with st.form("register_form"):
        role = _role_picker("register_role")
        c1, c2 = st.columns(2)
        with c1:
            name = st.text_input("Full name")
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
        with c2:
            phone = st.text_input("Phone")
            city = st.text_input("City")
            confirm = st.text_input("Confirm password", type="password")
        submitted = st.form_submit_button("Create account", type="primary", use_container_width=True)

    if submitted:
        if password != confirm:
            st.error("Passwords do not match")
            return
        user_data = {
            "name": name.strip(),
            "email": email.strip(),
            "password": password,
            "role": role,
            "phone": phone.strip(),
            "city": city.strip(),
        }
        with st.spinner("Creating your account..."):
            user = app.session.register(user_data)
        if user:
            st.success(f"Welcome to SuitCraft, {user.name}!")
            _go_to_dashboard(app)

    if app.session.error:
        st.error(app.session.error)


def render_auth_page(app: AppState):
    """Login and registration tabs for anonymous visitors"""
    if app.session.is_authenticated:
        st.info(f"You are signed in as {app.session.user.name}.")
        return

    tab_login, tab_register = st.tabs(["Sign in", "Register"])
    with tab_login:
        render_login(app)
    with tab_register:
        render_register(app)
