"""
Core infrastructure layer for Starfall.

- **config**: environment settings and YAML game tuning
- **logging**: structured, context-aware logging
- **exceptions**: infrastructure exception hierarchy
- **resilience**: circuit breaker for remote calls
- **cache**: Redis read-through cache for reference data
- **handlers**: handler name → service dispatch
- **infra**: application context (dependency wiring)

Submodules are imported directly; this package re-exports nothing so that
importing one subsystem never drags in the others.
"""
