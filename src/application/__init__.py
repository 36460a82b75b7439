"""Application layer - Use cases and orchestration.

This layer contains the rate limit control plane's use cases following the
CQRS pattern:
- Commands: Configuration writes and counter maintenance
- Queries: Configuration reads, live counter inspection and analytics

Structure:
- commands/: Command dataclasses and handlers (write operations)
- queries/: Query dataclasses and handlers (read operations)
- cqrs/: Registry of every command and query with its handler
- services/: Lookup and attribution helpers shared by handlers

The application layer orchestrates domain logic but contains no business rules.
"""
