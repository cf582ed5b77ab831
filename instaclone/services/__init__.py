"""Firestore and Storage access for the session controller."""
