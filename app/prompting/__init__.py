"""Prompting package.

This package contains deterministic prompt-construction helpers used by the
provider gateway (RAG, structured study plans, tool-augmented chat). It does
not perform retrieval, memory access or model invocation.
"""
