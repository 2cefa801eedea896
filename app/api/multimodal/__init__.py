"""Multipart upload preprocessing for API adapters (audio transcription uploads)."""
