"""
Procedural country partitioning for a grand-strategy map randomizer.
"""

__version__ = "0.1.0"
