"""
climate_pipeline/scheduler package marker.
"""
