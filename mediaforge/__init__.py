"""Media ingestion, validation, transformation and range delivery."""
