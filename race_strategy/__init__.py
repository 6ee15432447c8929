"""Race strategy DSL parser and deterministic race outcome estimator."""

__version__ = "0.1.0"
