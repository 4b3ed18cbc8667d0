from .retriever import Retriever, dedupe_and_cap, dedupe_key

__all__ = ["Retriever", "dedupe_and_cap", "dedupe_key"]
