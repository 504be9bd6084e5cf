"""
Valuation Services
==================

Multi-model fair-value aggregation for a single stock.

PIPELINE:
    snapshot -> model_values (flat value set + price ratio)
             -> categorizer (asset / earnings / mixed / S-RIM reference buckets)
             -> outlier_detector (median of positives, BPS exemption)
             -> aggregator (PER health, price signal, CalculatedResults)

PRIMITIVES shared with the screening engine:
    - numeric: NaN-free coercion, share parsing, medians, margin of safety
    - dcf: 10-year projection + Gordon terminal value
    - graham: classic / NCAV / modified Graham prices

Import submodules directly, e.g.
``from fairprice.domain.services.valuation.dcf import calculate_dcf``.
Keep this file free of imports: ``fairprice.domain.models`` imports ``numeric``.
"""
