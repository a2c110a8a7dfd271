"""
Command-line host for the knowledge-base assistant.

This package is responsible for:
- Reading pipeline settings from the environment / .env
- Chunking plain-text documents for inspection
- Ingesting documents into an in-memory knowledge base and answering questions
"""
