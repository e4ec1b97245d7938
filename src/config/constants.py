"""Constants for the configuration module."""

# Log component names
COMPONENT_CONFIG = "config"
COMPONENT_CLI = "cli"

# File type identifiers
FILE_TYPE_FEED = "feed"

