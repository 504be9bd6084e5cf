"""Domain services: single-stock valuation, investment checklist and population screens."""
