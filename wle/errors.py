"""
errors.py — Fatal error taxonomy for the WLE pipeline.

Every error below aborts the run; nothing is retried and no partial
report is written.

- DataUnavailable: the source CSVs cannot be fetched or read
- SchemaMismatch: expected columns are absent or the label is missing
- InsufficientData: fewer rows than the requested folds / resamples
- DegenerateFilter: the feature filter would drop the label or every feature
"""


class PipelineError(Exception):
    """Base class for fatal pipeline errors."""


class DataUnavailable(PipelineError):
    pass


class SchemaMismatch(PipelineError):
    pass


class InsufficientData(PipelineError):
    pass


class DegenerateFilter(PipelineError):
    pass
