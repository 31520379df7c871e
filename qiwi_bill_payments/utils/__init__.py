"""Normalization and signature helpers."""
