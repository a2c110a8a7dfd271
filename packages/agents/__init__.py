"""Question-answering agent and the Groq generation adapter."""
