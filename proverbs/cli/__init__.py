"""Command-line interface: schema, seed, ingestion, search and serve."""
