"""voice-pos: retail point-of-sale backend with voice command dispatch."""

__version__ = "0.1.0"
