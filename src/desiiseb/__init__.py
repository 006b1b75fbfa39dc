"""Feed, interaction and notification core for the desiiseb social network."""

__version__ = "0.1.0"
