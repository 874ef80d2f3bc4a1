"""rootly-tui -- browse Rootly incidents and alerts from the terminal.

The package sits between a terminal UI and the Rootly REST API. Most of the
interesting work happens in the layer between the two: a two-tier TTL cache
(in-memory and on-disk), deterministic cache keys, version-aware addressing
for detail records, and a fire-and-forget fetch scheduler that feeds a
single-threaded state reducer.

Typical workflow::

    rootly-tui config init --api-key "$ROOTLY_API_KEY"
    rootly-tui run                # interactive view
    rootly-tui incidents --page 2 # one-shot listing

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for configuration and domain records.
    config: XDG-aware configuration loading and precedence resolution.
    cache: TTL caches, key builder, and the durable store.
    client: Rootly HTTP client, payload decoding, and mock data.
    orchestrator: Cache-then-fetch composition per resource operation.
    tui: Scheduler, state reducer, rendering, and the interactive loop.
    debug: Injected logging handle backed by an in-memory ring buffer.
    exceptions: Exception hierarchy with exit-code mapping.
"""

__version__ = "0.3.0"
