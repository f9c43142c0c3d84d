"""Structured configuration for ecodiff runs."""
