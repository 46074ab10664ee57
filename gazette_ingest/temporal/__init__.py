"""Temporal workflows, activities and worker for gazette processing."""
