"""Core traversal, field metadata and caching modules.

WHY: The core package holds the algorithm that every entry point
shares: resolving dataclass field tables, caching them, filtering by
group, and walking values into the IR.

HOW: fields.py resolves per-type field tables, cache.py memoizes them
behind an LRU, groups.py is the inclusion predicate, context.py holds
per-call traversal state, traversal.py builds the IR defined in ir.py.

RULES:
- No encoding here; the IR is the contract with encoder.py
- Per-call state lives in SerializeContext, never in module globals
- The only shared mutable state is the field cache
"""
