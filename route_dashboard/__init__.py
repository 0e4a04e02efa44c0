"""Streamlit page for planning and viewing truck routes."""
