"""Safety package.

Contains the moderation adapter that turns provider moderation results into
the fixed six-category verdict returned by the moderation endpoint.
"""
