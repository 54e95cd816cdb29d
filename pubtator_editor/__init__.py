"""
PubTator Annotation Editor
Parse, annotate, highlight and export PubTator biomedical documents
"""

__version__ = "1.0.0"
