"""
Project File I/O for Sketch2Print

Handles saving and loading project files: the document snapshot
(``width``, ``height``, ``elements``) plus a format version and a save
timestamp, written as JSON.
"""

import json
from typing import Dict, Any, Optional
from datetime import datetime
import logging

from ..core.document import Document
from ..core.errors import Sketch2PrintError

logger = logging.getLogger(__name__)

FORMAT_VERSION = '1.0'


def save_project(document: Document, filepath: str) -> bool:
    """
    Save a document to a project file.

    Args:
        document: The document to save
        filepath: Path to save the file

    Returns:
        True if successful, False otherwise
    """
    try:
        doc_dict = document_to_dict(document)

        # Add metadata
        doc_dict['version'] = FORMAT_VERSION
        doc_dict['saved_at'] = datetime.now().isoformat()

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(doc_dict, f, indent=2, ensure_ascii=False)

        logger.info(f"Saved project with {len(document)} elements to {filepath}")
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Error saving project {filepath}: {e}")
        return False


def load_project(filepath: str) -> Optional[Document]:
    """
    Load a document from a project file.

    Args:
        filepath: Path to the project file

    Returns:
        Document object if successful, None otherwise
    """
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            doc_dict = json.load(f)

        document = dict_to_document(doc_dict)
        logger.info(f"Loaded project with {len(document)} elements from {filepath}")
        return document
    except (OSError, ValueError, Sketch2PrintError) as e:
        logger.error(f"Error loading project {filepath}: {e}")
        return None


def document_to_dict(document: Document) -> Dict[str, Any]:
    """Convert Document to dictionary."""
    return document.to_dict()


def dict_to_document(doc_dict: Dict[str, Any]) -> Document:
    """
    Convert dictionary to Document.

    Accepts a bare snapshot as well as a saved project. Unknown element
    types and records missing required content are skipped.
    """
    if not isinstance(doc_dict, dict):
        raise ValueError("Project data must be a JSON object")

    version = doc_dict.get('version')
    if version is not None and str(version).split('.')[0] != FORMAT_VERSION.split('.')[0]:
        logger.warning(f"Project format {version} may not be fully supported")

    return Document.from_dict(doc_dict)
