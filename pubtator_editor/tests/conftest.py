"""
Shared fixtures for the editor tests.
"""

import pytest

from pubtator_editor.core.config import EditorConfig
from pubtator_editor.core.models import Annotation, Document
from pubtator_editor.core.store import AnnotationManager


SAMPLE_PUBTATOR = (
    "100|t|BRCA1 mutations in breast cancer\n"
    "100|a|Carriers of BRCA1 variants have a high risk of breast cancer.\n"
    "100\t0\t5\tBRCA1\tGene\t672\n"
    "100\t19\t32\tbreast cancer\tDisease\tD001943\n"
    "\n"
    "200|t|Tamoxifen therapy\n"
    "200|a|Tamoxifen reduced recurrence.\n"
    "200\t0\t9\tTamoxifen\tChemical\n"
    "\n"
)


@pytest.fixture
def config(tmp_path):
    """Configuration writing fallback downloads into a temp directory."""
    cfg = EditorConfig()
    cfg.fallback_dir = str(tmp_path / "downloads")
    return cfg


@pytest.fixture
def manager(config):
    """Store holding a single document with no annotations."""
    doc = Document(id="doc1", title="Hello world", abstract="p53 causes cancer")
    return AnnotationManager(documents=[doc], config=config)


def make_annotation(start, end, text, entity_type="Gene", normalized_id=None, doc_id="doc1"):
    return Annotation(id=doc_id, start=start, end=end, text=text, type=entity_type,
                      normalized_id=normalized_id)
