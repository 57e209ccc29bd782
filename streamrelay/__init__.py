"""streamrelay — relay streamed LLM output to a terminal or a browser."""

__version__ = "0.1.0"
