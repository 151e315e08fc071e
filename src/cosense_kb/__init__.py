"""cosense-kb: link graph and markup parser for Cosense (Scrapbox) exports."""

__version__ = "0.1.0"
