"""Drafts for Friends: time-limited share links for unpublished documents."""
