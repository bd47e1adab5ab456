"""
LoyaltyHub client access layer.

Supabase, REST backend and AI microservice clients behind a single
fallback-chained facade, plus the Streamlit session glue.
"""

__version__ = "0.1.0"
