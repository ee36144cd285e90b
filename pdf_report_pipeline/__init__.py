"""
PDF Report Pipeline

Turn batches of PDF documents into structured analysis reports with Mistral
Document AI, and optionally publish each report as a Google Doc.
"""

__version__ = "0.1.0"
