"""
spaCy NER span extractor.

Uses en_core_web_sm (configurable) for English named entity recognition.
Models are loaded lazily and cached per model name; a missing model is
logged and treated as "no NER" rather than an error.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

# Lazy-loaded spaCy models, keyed by model name
_nlp_models: Dict[str, object] = {}


@dataclass(frozen=True)
class NerSpan:
    """One entity reported by the NER model."""

    text: str
    label: str
    start: int
    end: int


def load_ner_model(model_name: str):
    """
    Lazy-load a spaCy model to avoid import-time cost.

    Returns:
        The loaded Language object, or None if spaCy or the model is missing.
    """
    if model_name in _nlp_models:
        return _nlp_models[model_name]

    try:
        import spacy  # type: ignore[import-untyped]
        model = spacy.load(model_name)
        logger.info("Loaded spaCy model: %s", model_name)
    except (OSError, ImportError):
        logger.warning(
            "spaCy model '%s' not found. "
            "Install with: python -m spacy download %s",
            model_name,
            model_name,
        )
        model = None

    _nlp_models[model_name] = model
    return model


def extract_ner_spans(text: str, nlp_model) -> List[NerSpan]:
    """
    Run the NER model over *text*.

    Args:
        text: Task title text.
        nlp_model: Callable returning a doc with ``.ents`` (spaCy Language).

    Returns:
        Spans with exact character offsets; empty if no model is given.
    """
    if nlp_model is None:
        return []

    doc = nlp_model(text)
    spans: List[NerSpan] = []

    for ent in doc.ents:
        if ent.end_char <= ent.start_char:
            continue
        spans.append(
            NerSpan(
                text=ent.text,
                label=ent.label_,
                start=ent.start_char,
                end=ent.end_char,
            )
        )

    return spans


def filter_spans(spans: List[NerSpan], labels: set) -> List[NerSpan]:
    return [s for s in spans if s.label in labels]


def resolve_model(nlp_model, model_name: Optional[str], enabled: bool):
    """Pick the explicit model, else load *model_name* if NER is enabled."""
    if not enabled:
        return None
    if nlp_model is not None:
        return nlp_model
    if model_name:
        return load_ner_model(model_name)
    return None
