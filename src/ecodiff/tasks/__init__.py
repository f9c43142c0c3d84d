"""Registered analyses built on the comparison engine."""
