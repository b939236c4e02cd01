"""
Default QC thresholds for generated impulse responses.
"""
QC_THRESHOLDS = {
    "peak_linear_max": 1.0,  # Above this the 16-bit encoder clips
    "nonzero_ratio_min": 0.001,  # Fraction of samples still carrying a reflection
    "drr_tolerance_db": 0.5,  # Half-width of the accepted DRR band
    "edt_decay_db": 10.0,  # Schroeder drop used for the EDT estimate
}
