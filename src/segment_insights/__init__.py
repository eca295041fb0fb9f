"""Segmentation analytics and rule-evaluation engine."""

import os


def get_server_version() -> str:
    """Get version with fallback for dev mode."""
    if version := os.environ.get("SERVER_VERSION"):
        return version
    try:
        from importlib.metadata import version as pkg_version

        return pkg_version("segment-insights")
    except Exception:
        return "dev"


SERVER_VERSION = get_server_version()
# Bump when report schema changes materially (new fields, renamed fields, structure changes)
# v1: Initial report schema (findings, risks, opportunities, actions, supporting images)
# v2: Tagged support variants, duplicate_entity_lists, historical cadence block
SCHEMA_VERSION = "2"
