"""Workspace package - directory trust and admission.

Normalizes requested paths, classifies them by folder trust, adds the
admitted ones to the session's workspace and reports the outcome.
"""
from __future__ import annotations

__all__ = [
    "AdmissionBatch",
    "AdmissionController",
    "AdmissionResult",
    "CompletionReporter",
    "DecisionState",
    "IncludeDirsTrust",
    "PendingQueue",
    "PendingTrustDecision",
    "TrustChoice",
    "TrustLevel",
    "TrustVerdict",
    "TrustedFolders",
    "WorkspaceContext",
    "expand_home_dir",
    "split_path_argument",
]

from wsgate.workspace.admission import (
    AdmissionBatch,
    AdmissionController,
    AdmissionResult,
    split_path_argument,
)
from wsgate.workspace.context import WorkspaceContext
from wsgate.workspace.decision import DecisionState, PendingTrustDecision, TrustChoice
from wsgate.workspace.include_dirs import IncludeDirsTrust
from wsgate.workspace.paths import expand_home_dir
from wsgate.workspace.pending import PendingQueue
from wsgate.workspace.reporter import CompletionReporter
from wsgate.workspace.trust_store import TrustedFolders, TrustLevel, TrustVerdict
