"""Layout classification through the OpenAI chat-completions API."""

from __future__ import annotations

from scry.classifier.client import AnalysisWorker, Classifier
from scry.classifier.models import AnalysisResult, ViewKind, ViewType

__all__ = ["AnalysisResult", "AnalysisWorker", "Classifier", "ViewKind", "ViewType"]
