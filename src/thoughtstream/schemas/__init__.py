"""Schemas package - request/response models for the API."""
