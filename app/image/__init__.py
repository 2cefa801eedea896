"""Image generation package.

Scope:
    `service` turns a validated prompt plus optional model/quality/style hints
    into an `ImageResult` via the image capability.

Out of scope:
    - Image editing or variations.
    - Downloading or decoding generated images; URLs and base64 payloads are
      returned as the provider sent them.
"""
