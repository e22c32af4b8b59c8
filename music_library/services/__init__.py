"""Business logic services.

Services contain the catalog logic (cache-aside reads, enrichment,
verse segmentation) and are called by routes. Store and cache handles
are passed in explicitly.
"""
