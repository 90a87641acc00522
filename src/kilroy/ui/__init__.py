"""Streamlit front end for Kilroy."""
