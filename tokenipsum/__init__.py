"""Mock LLM server for exercising API clients without a real provider."""

__version__ = "0.1.0"
