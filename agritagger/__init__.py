"""AgriTagger: map-based tagging of agricultural plots."""

__version__ = "0.1.0"
