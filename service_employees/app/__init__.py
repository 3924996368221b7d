"""
Employees Service package for the Employee Access Layer.

The service fronts a third-party, rate-limited employee-record service:
- Envelope decoding and error classification for every upstream call
- Retries with jittered exponential backoff on rate limiting
- A single-slot collection cache, swept periodically and evicted on writes

Structure:
- app.main: FastAPI app and route wiring.
- app.service: Employee operations and aggregates over the cached collection.
- app.adapters: Upstream HTTP client, envelope decoder, status classifier.
- app.caching: The collection cache.
- app.models: Employee data models.
"""
