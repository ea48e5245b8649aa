"""Cross-platform search, ranking, validation and import."""
