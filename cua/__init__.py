"""Computer use agent core: task memory, summarization, the run loop and errors."""

__version__ = "0.1.0.dev0"