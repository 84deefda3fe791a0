"""Boundary schemas for hosts and sync layers."""
