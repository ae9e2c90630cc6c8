"""Studity notification and reminder backend."""
