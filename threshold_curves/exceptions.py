class InvalidInput(ValueError):
    """
    Raise this exception when the inputs to a curve builder are
    structurally invalid (empty records, wrong label cardinality,
    unknown positive class, out-of-range scores or thresholds).
    """
