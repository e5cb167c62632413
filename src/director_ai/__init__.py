"""Director.AI - turn two sentences into generated scenes."""

__version__ = "0.1.0"
