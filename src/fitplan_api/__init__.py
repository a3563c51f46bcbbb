"""FitPlan workout planning and tracking API."""

__version__ = "0.1.0"
