# ==============================================================================
# IT MARINE - Record keeping for the IT department of a ferry operator
# ==============================================================================
# Work logs, repair/purchase tickets, assets and ship inspections kept in a
# single JSON document, served by a small Flask app (see main.py).
# ==============================================================================

__version__ = '1.0.0'
