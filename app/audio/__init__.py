"""Audio adapters: speech synthesis format handling and transcription uploads."""
