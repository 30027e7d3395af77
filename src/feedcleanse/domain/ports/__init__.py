"""Ports connecting the cleansing core to its collaborators."""
