"""
Sketch2Print I/O Module

Handles project files and PDF export.
"""

from .project_io import save_project, load_project
from .pdf_export import ReportLabContext, export_pdf, export_pdf_file

__all__ = ['save_project', 'load_project', 'ReportLabContext', 'export_pdf', 'export_pdf_file']
