"""Coaching prompt construction."""
