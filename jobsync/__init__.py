"""Core configuration, storage, schemas and errors for the jobsync client."""
