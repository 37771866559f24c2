# ==============================================
# ANALYSIS & CLASSIFICATION
# ==============================================
#
# This package turns a Blob Service request target into a
# classification verdict, and holds the discovery policies that
# decide what the verdict is allowed to imply.
#
# Modules:
# --------
# - classifier.py   → AddressClassifier: predicates and name accessors
# - decision.py     → DiscoveryPolicy, RequestDescriptor, ClassificationResult
#
# ==============================================

from .classifier import AddressClassifier, classify_url
from .decision import (
    ClassificationResult,
    DiscoveryPolicy,
    RequestDescriptor,
    ResourceKind,
    SubOperation,
)

__all__ = [
    "AddressClassifier",
    "classify_url",
    "ClassificationResult",
    "DiscoveryPolicy",
    "RequestDescriptor",
    "ResourceKind",
    "SubOperation",
]
