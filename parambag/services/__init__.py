"""Collaborators invoked by the parameter bag (validation/sanitization rules)."""
