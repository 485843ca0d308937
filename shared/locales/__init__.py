"""Bundled string tables for the version check prompts."""
