"""Command line commands for artifactindex."""
