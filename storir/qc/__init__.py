"""
Quality Control module for evaluating generated impulse responses.
"""
from storir.qc.qc import analyze
from storir.qc.thresholds import QC_THRESHOLDS

__all__ = ["analyze", "QC_THRESHOLDS"]
