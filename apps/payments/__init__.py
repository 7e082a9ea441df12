"""Payments bounded context: checkout pricing, gateway client and the webhook ingestor."""
