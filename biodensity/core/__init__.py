"""
Core aggregation engine.

Modules:
- models.py - Observation, Region, Trail and geometry data classes
- geometry/ - Pure geometry kernel (containment, distance, area)
- watershed.py - Per-region counting and density
- trails.py - Per-trail buffer scoring
- classify.py - Tier classification and ranking
- pipeline.py - One analysis run end to end
"""
