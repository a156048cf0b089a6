"""
inbox — client-side inbox engine: message search, FAQ library views,
multi-select batch actions and priority grouping of conversations.
"""

__version__ = "1.0.0"
