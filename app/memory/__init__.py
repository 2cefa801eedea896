"""Memory subsystem package.

Architectural role:
    - `chat_memory`: in-process message-window memory keyed by conversation id,
      used by stateful chat turns.

No memory artifact is persisted; conversation logs live for the process
lifetime only.
"""
