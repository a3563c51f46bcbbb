"""Progress aggregation and history export."""
