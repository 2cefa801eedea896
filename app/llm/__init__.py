"""LLM access package.

Architectural role:
    Provides provider configuration, capability protocols, the HTTP transport
    and chat entrypoints used by the provider gateway.

Module split:
    - `provider_config`: environment-driven provider, model and capability configuration.
    - `base`: capability protocols (chat, embedding, image, moderation, speech, transcription).
    - `client`: OpenAI-compatible HTTP transport implementing every capability.
    - `errors`: provider-side exception types.
    - `service`: prompt-to-message adapters, tool loop and structured replies.
"""
