"""Locally defined utilities the chat model may call during tool-augmented chat.

Scope:
    - `utility_tools`: the callable utilities and their function-tool schemas.
    - `executor`: dispatch of model-issued tool calls onto those utilities.
"""
