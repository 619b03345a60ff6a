"""
EmotiCare API - HTTP shell around the session engine.

Holds the in-memory session store, runs the keyword crisis detector when
the caller sends no crisis flag, and formats reports for delivery.
"""
