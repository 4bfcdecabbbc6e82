"""ConfDesk: conference desk for authors, reviewers and organizers."""

__version__ = "0.1.0"
