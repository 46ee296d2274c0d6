from .langfuse_tracing import initialize_langfuse_tracing

__all__ = ["initialize_langfuse_tracing"]
