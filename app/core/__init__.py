"""Core orchestration package.

Architectural role:
    Sits between the API/CLI adapters and the capability subsystems
    (LLM transport, retrieval, prompting, memory, tools, image, safety, audio).

Composition:
    - `gateway`: capability set, feature gating and every exposed operation.
    - `errors`: error taxonomy and provider-failure classification.
    - `validation`: input normalization shared by all operations.
    - `types`: result contracts serialized by the HTTP adapter.

Determinism and side effects:
    Package import is side-effect free. `gateway.build_gateway()` reads
    provider configuration when called.
"""
