"""
climate_pipeline/parsers package marker.

Every parser is a pure function from a raw payload to a normalized list of
daily points. Malformed rows are skipped; a parser never raises for one bad row.
"""

from climate_pipeline.parsers.ecmwf import PREINDUSTRIAL_OFFSET_C, parse_ecmwf_climate_pulse_csv
from climate_pipeline.parsers.ncei import parse_ncei_ocean_heat_content_csv
from climate_pipeline.parsers.noaa_gml import (
    parse_noaa_aggi_csv,
    parse_noaa_ch4_monthly_csv,
    parse_noaa_co2_daily_csv,
)
from climate_pipeline.parsers.nsidc import parse_nsidc_daily_extent_csv
from climate_pipeline.parsers.reanalyzer import (
    parse_reanalyzer_daily_anomaly_json,
    parse_reanalyzer_daily_json,
)
from climate_pipeline.parsers.sea_level import parse_global_mean_sea_level_text

__all__ = [
    "PREINDUSTRIAL_OFFSET_C",
    "parse_ecmwf_climate_pulse_csv",
    "parse_global_mean_sea_level_text",
    "parse_ncei_ocean_heat_content_csv",
    "parse_noaa_aggi_csv",
    "parse_noaa_ch4_monthly_csv",
    "parse_noaa_co2_daily_csv",
    "parse_nsidc_daily_extent_csv",
    "parse_reanalyzer_daily_anomaly_json",
    "parse_reanalyzer_daily_json",
]
