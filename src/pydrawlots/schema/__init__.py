"""JSON Schemas describing the local documents."""
