"""
Venue Hierarchy.

Builds a hierarchical location taxonomy (continent > country > state > city >
street > street + number) from event venue addresses and renders it.

Architecture:
  schemas/     - LocationLevels, TermNode, LevelWindow, display attributes
  configs/     - Settings (pydantic-settings) and the hierarchy YAML policy
  geocoding/   - NominatimGeocoder, TTL cache, AddressNormalizer
  hierarchy/   - slugs, TermGraphBuilder, path resolution, windows, canonical links
  storage/     - TermStore contract, in-memory and PostgreSQL stores
  rendering/   - HierarchyRenderer (HTML/text) and the authoring preview
  services/    - resolution (save hook) and display services, ServiceFactory
  monitoring/  - structured logging

Entry points:
  venue_hierarchy.main:app   (FastAPI)
  venue_hierarchy.cli:main   (venue-hierarchy command)
"""

__version__ = "0.1.0"
