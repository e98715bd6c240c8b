"""Thin clients for the external systems the WISMO agent talks to."""
