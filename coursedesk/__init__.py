"""Data-view engine and service layer for the course admin dashboard."""
