from __future__ import annotations
import streamlit as st

from loyalty_core.bootstrap import session_backend
from loyalty_core.config import load_settings
from loyalty_core.errors import LoyaltyHubError, handle_error
from loyalty_core.logging import setup_logging
from loyalty_core.services import InsightsService

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
st.set_page_config(
    page_title="LoyaltyHub",
    page_icon="🎁",
    layout="centered",
)


# Settings are shared by every session; the backend is per session
@st.cache_resource
def get_settings():
    settings = load_settings()
    setup_logging(level=settings.log_level)
    return settings


try:
    backend = session_backend(get_settings())
except LoyaltyHubError as e:
    handle_error(e, user_message="LoyaltyHub is not configured.")
    st.error(e.message)
    st.stop()

st.title("🎁 LoyaltyHub")

# ============================================================================
# SIGN IN
# ============================================================================
user = backend.get_current_user()

if user is None:
    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        result = backend.login(email, password)
        if result.success:
            st.rerun()
        st.error(result.message)

    if st.button("Continue as guest", key="guest_btn"):
        backend.start_guest_session()
        st.rerun()

    st.stop()

# ============================================================================
# DASHBOARD
# ============================================================================
st.subheader(f"Welcome, {user.first_name}")

try:
    points = backend.get_loyalty_points(user.id)
except LoyaltyHubError as e:
    handle_error(e, notify=True, user_message="Could not load your points.")
    points = None

if points is not None:
    col1, col2, col3 = st.columns(3)
    col1.metric("Balance", f"{points.points_balance:,}")
    col2.metric("Earned", f"{points.total_earned:,}")
    col3.metric("Redeemed", f"{points.total_redeemed:,}")

if st.button("Load AI insights", key="insights_btn"):
    try:
        bundle = InsightsService(backend).load_insights(user.id)
    except LoyaltyHubError as e:
        handle_error(e, notify=True, user_message="AI insights are unavailable right now.")
    else:
        st.metric("Recommendations", bundle.metrics.total_recommendations)
        for rec in bundle.recommendations:
            st.write(f"**{rec.title}** ({rec.priority}) - {rec.description}")

if st.button("Log out", key="logout_btn"):
    backend.logout()
    st.rerun()
