from fetchstats.transport.httpx_trace import HttpxTraceAdapter, format_addr, system_resolver

__all__ = ["HttpxTraceAdapter", "format_addr", "system_resolver"]
