"""
climate_pipeline/catalog.py

Metric, map and verification tables.

Every metric the dataset must contain is one `MetricSpec` row. The update
pipeline iterates this table for fetching, sanitizing and the completeness
check, so adding a metric means adding a row here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from climate_pipeline.connectors.base import PayloadKind
from climate_pipeline.domain.points import DailyPoint
from climate_pipeline.maps.snapshot import MapProduct
from climate_pipeline.parsers import (
    PREINDUSTRIAL_OFFSET_C,
    parse_ecmwf_climate_pulse_csv,
    parse_global_mean_sea_level_text,
    parse_ncei_ocean_heat_content_csv,
    parse_noaa_aggi_csv,
    parse_noaa_ch4_monthly_csv,
    parse_noaa_co2_daily_csv,
    parse_nsidc_daily_extent_csv,
    parse_reanalyzer_daily_anomaly_json,
    parse_reanalyzer_daily_json,
)
from climate_pipeline.processing.sanitizer import SanitizationPolicy

Parser = Callable[[Any], list[DailyPoint]]

ERA5_GLOBAL_SURFACE_TEMP_URL = "https://cr.acg.maine.edu/clim/t2_daily/json/era5_world_t2_day.json"
ERA5_NH_SURFACE_TEMP_URL = "https://cr.acg.maine.edu/clim/t2_daily/json/era5_nh_t2_day.json"
ERA5_SH_SURFACE_TEMP_URL = "https://cr.acg.maine.edu/clim/t2_daily/json/era5_sh_t2_day.json"
ERA5_ARCTIC_SURFACE_TEMP_URL = "https://cr.acg.maine.edu/clim/t2_daily/json/era5_arctic_t2_day.json"
ERA5_ANTARCTIC_SURFACE_TEMP_URL = "https://cr.acg.maine.edu/clim/t2_daily/json/era5_antarctic_t2_day.json"
OISST_GLOBAL_SST_URL = "https://cr.acg.maine.edu/clim/sst_daily/json_2clim/oisst2.1_world2_sst_day.json"
OISST_NORTH_ATLANTIC_SST_URL = "https://cr.acg.maine.edu/clim/sst_daily/json_2clim/oisst2.1_natlan_sst_day.json"
ECMWF_CLIMATE_PULSE_URL = (
    "https://sites.ecmwf.int/data/climatepulse/data/series/era5_daily_series_2t_global.csv"
)
CU_GLOBAL_MEAN_SEA_LEVEL_URL = "https://sealevel.colorado.edu/files/2025_rel1/gmsl_2025rel1_seasons_rmvd.txt"
NCEI_OCEAN_HEAT_CONTENT_URL = (
    "https://www.ncei.noaa.gov/data/oceans/woa/DATA_ANALYSIS/3M_HEAT_CONTENT/DATA/basin/3month/"
    "ohc2000m_levitus_climdash_seasonal.csv"
)
NSIDC_NORTH_DAILY_EXTENT_URL = (
    "https://noaadata.apps.nsidc.org/NOAA/G02135/north/daily/data/N_seaice_extent_daily_v4.0.csv"
)
NSIDC_SOUTH_DAILY_EXTENT_URL = (
    "https://noaadata.apps.nsidc.org/NOAA/G02135/south/daily/data/S_seaice_extent_daily_v4.0.csv"
)
NOAA_MAUNA_LOA_CO2_DAILY_URL = "https://gml.noaa.gov/webdata/ccgg/trends/co2/co2_daily_mlo.csv"
NOAA_GLOBAL_CH4_MONTHLY_URL = "https://gml.noaa.gov/webdata/ccgg/trends/ch4/ch4_mm_gl.csv"
NOAA_AGGI_CSV_URL = "https://gml.noaa.gov/aggi/AGGI_Table.csv"
CR_T2_LAST_MAP_DATE_URL = "https://cr.acg.maine.edu/clim/t2_daily/json/last_map_date.json"
CR_SST_LAST_MAP_DATE_URL = "https://cr.acg.maine.edu/clim/sst_daily/json/dates_sstanom.json"
MAP_CLIMATOLOGY_PERIOD = "1991-2020"


@dataclass(frozen=True)
class MetricSpec:
    """
    How one metric is obtained and which policy gates it.

    A fetched metric sets `source_url`, `payload_kind` and `parser`. A merged
    metric sets `merge_of` instead and is built from two other metrics.
    `anomaly_of` names the absolute metric whose climatology backs an anomaly
    series when the feed lacks a climatology row.
    """

    key: str
    policy: SanitizationPolicy
    provenance: str
    source_url: str | None = None
    payload_kind: PayloadKind = PayloadKind.TEXT
    parser: Parser | None = None
    merge_of: tuple[str, str] | None = None
    anomaly_of: str | None = None

    @property
    def is_merged(self) -> bool:
        return self.merge_of is not None


@dataclass(frozen=True)
class MapJob:
    """
    A map product plus where its target day comes from.
    """

    product: MapProduct
    date_source_url: str
    fallback_metric: str


@dataclass(frozen=True)
class VerificationRule:
    min_value: float
    max_value: float
    max_age_days: int
    min_points: int
    min_points_last_year: int


def _policy(min_value: float, max_value: float, max_age_days: int) -> SanitizationPolicy:
    return SanitizationPolicy(min_value=min_value, max_value=max_value, max_age_days=max_age_days)


def _reanalyzer(key: str, url: str, policy: SanitizationPolicy) -> MetricSpec:
    return MetricSpec(
        key=key,
        policy=policy,
        provenance=url,
        source_url=url,
        payload_kind=PayloadKind.JSON,
        parser=parse_reanalyzer_daily_json,
    )


METRICS: tuple[MetricSpec, ...] = (
    _reanalyzer("global_surface_temperature", ERA5_GLOBAL_SURFACE_TEMP_URL, _policy(5, 40, 20)),
    _reanalyzer("global_sea_surface_temperature", OISST_GLOBAL_SST_URL, _policy(10, 40, 45)),
    MetricSpec(
        key="global_mean_sea_level",
        policy=_policy(-200, 300, 450),
        provenance=CU_GLOBAL_MEAN_SEA_LEVEL_URL,
        source_url=CU_GLOBAL_MEAN_SEA_LEVEL_URL,
        parser=parse_global_mean_sea_level_text,
    ),
    MetricSpec(
        key="ocean_heat_content",
        policy=_policy(-50, 120, 900),
        provenance=NCEI_OCEAN_HEAT_CONTENT_URL,
        source_url=NCEI_OCEAN_HEAT_CONTENT_URL,
        parser=parse_ncei_ocean_heat_content_csv,
    ),
    _reanalyzer("northern_hemisphere_surface_temperature", ERA5_NH_SURFACE_TEMP_URL, _policy(-20, 40, 20)),
    _reanalyzer("southern_hemisphere_surface_temperature", ERA5_SH_SURFACE_TEMP_URL, _policy(-20, 35, 20)),
    _reanalyzer("arctic_surface_temperature", ERA5_ARCTIC_SURFACE_TEMP_URL, _policy(-70, 25, 20)),
    _reanalyzer("antarctic_surface_temperature", ERA5_ANTARCTIC_SURFACE_TEMP_URL, _policy(-80, 25, 20)),
    _reanalyzer("north_atlantic_sea_surface_temperature", OISST_NORTH_ATLANTIC_SST_URL, _policy(-5, 40, 45)),
    MetricSpec(
        key="global_surface_temperature_anomaly",
        policy=_policy(-10, 10, 20),
        provenance=(
            "Derived from ERA5 daily global surface temperature minus 1991-2020 daily "
            "climatology from the same feed."
        ),
        source_url=ERA5_GLOBAL_SURFACE_TEMP_URL,
        payload_kind=PayloadKind.JSON,
        parser=parse_reanalyzer_daily_anomaly_json,
        anomaly_of="global_surface_temperature",
    ),
    MetricSpec(
        key="global_sea_surface_temperature_anomaly",
        policy=_policy(-10, 10, 45),
        provenance=(
            "Derived from OISST v2.1 daily global SST minus 1991-2020 daily climatology "
            "from the same feed."
        ),
        source_url=OISST_GLOBAL_SST_URL,
        payload_kind=PayloadKind.JSON,
        parser=parse_reanalyzer_daily_anomaly_json,
        anomaly_of="global_sea_surface_temperature",
    ),
    MetricSpec(
        key="daily_global_mean_temperature_anomaly",
        policy=_policy(-10, 10, 20),
        provenance=(
            f"{ECMWF_CLIMATE_PULSE_URL} (ano_91-20 adjusted by +{PREINDUSTRIAL_OFFSET_C}C to "
            "approximate 1850-1900 preindustrial baseline)"
        ),
        source_url=ECMWF_CLIMATE_PULSE_URL,
        parser=parse_ecmwf_climate_pulse_csv,
    ),
    MetricSpec(
        key="global_sea_ice_extent",
        policy=_policy(0, 60, 20),
        provenance="Derived as north + south overlap from NSIDC Sea Ice Index v4 daily files.",
        merge_of=("arctic_sea_ice_extent", "antarctic_sea_ice_extent"),
    ),
    MetricSpec(
        key="arctic_sea_ice_extent",
        policy=_policy(0, 30, 20),
        provenance=NSIDC_NORTH_DAILY_EXTENT_URL,
        source_url=NSIDC_NORTH_DAILY_EXTENT_URL,
        parser=parse_nsidc_daily_extent_csv,
    ),
    MetricSpec(
        key="antarctic_sea_ice_extent",
        policy=_policy(0, 35, 20),
        provenance=NSIDC_SOUTH_DAILY_EXTENT_URL,
        source_url=NSIDC_SOUTH_DAILY_EXTENT_URL,
        parser=parse_nsidc_daily_extent_csv,
    ),
    MetricSpec(
        key="atmospheric_co2",
        policy=_policy(200, 700, 120),
        provenance=NOAA_MAUNA_LOA_CO2_DAILY_URL,
        source_url=NOAA_MAUNA_LOA_CO2_DAILY_URL,
        parser=parse_noaa_co2_daily_csv,
    ),
    MetricSpec(
        key="atmospheric_ch4",
        policy=_policy(1000, 3000, 220),
        provenance=NOAA_GLOBAL_CH4_MONTHLY_URL,
        source_url=NOAA_GLOBAL_CH4_MONTHLY_URL,
        parser=parse_noaa_ch4_monthly_csv,
    ),
    MetricSpec(
        key="atmospheric_aggi",
        policy=_policy(0.5, 3.5, 1000),
        provenance=NOAA_AGGI_CSV_URL,
        source_url=NOAA_AGGI_CSV_URL,
        parser=parse_noaa_aggi_csv,
    ),
)

# Provenance entries that are not series of their own.
EXTRA_SOURCES: dict[str, str] = {
    "maps_2m_temperature_dates": CR_T2_LAST_MAP_DATE_URL,
    "maps_sst_dates": CR_SST_LAST_MAP_DATE_URL,
}

_T2_SOURCE_PAGE = "https://climatereanalyzer.org/clim/t2_daily/"
_SST_SOURCE_PAGE = "https://climatereanalyzer.org/clim/sst_daily/"

MAP_JOBS: tuple[MapJob, ...] = (
    MapJob(
        product=MapProduct(
            key="global_2m_temperature",
            file_name="global-2m-temperature.png",
            url_template=(
                "https://cr.acg.maine.edu/clim/t2_daily/maps/t2/world-wt/{year}/t2_world-wt_{year}_d{doy}.png"
            ),
            source_page=_T2_SOURCE_PAGE,
        ),
        date_source_url=CR_T2_LAST_MAP_DATE_URL,
        fallback_metric="global_surface_temperature",
    ),
    MapJob(
        product=MapProduct(
            key="global_2m_temperature_anomaly",
            file_name="global-2m-temperature-anomaly.png",
            url_template=(
                f"https://cr.acg.maine.edu/clim/t2_daily/maps/t2anom_{MAP_CLIMATOLOGY_PERIOD}/world-wt/"
                "{year}/t2anom_world-wt_{year}_d{doy}.png"
            ),
            source_page=_T2_SOURCE_PAGE,
        ),
        date_source_url=CR_T2_LAST_MAP_DATE_URL,
        fallback_metric="global_surface_temperature",
    ),
    MapJob(
        product=MapProduct(
            key="global_sst",
            file_name="global-sst.png",
            url_template=(
                "https://cr.acg.maine.edu/clim/sst_daily/maps/sst/world-wt3/{year}/sst_world-wt3_{year}_d{doy}.png"
            ),
            source_page=_SST_SOURCE_PAGE,
        ),
        date_source_url=CR_SST_LAST_MAP_DATE_URL,
        fallback_metric="global_sea_surface_temperature",
    ),
    MapJob(
        product=MapProduct(
            key="global_sst_anomaly",
            file_name="global-sst-anomaly.png",
            url_template=(
                f"https://cr.acg.maine.edu/clim/sst_daily/maps/sstanom_{MAP_CLIMATOLOGY_PERIOD}/world-wt3/"
                "{year}/sstanom_world-wt3_{year}_d{doy}.png"
            ),
            source_page=_SST_SOURCE_PAGE,
        ),
        date_source_url=CR_SST_LAST_MAP_DATE_URL,
        fallback_metric="global_sea_surface_temperature",
    ),
)

VERIFICATION_RULES: dict[str, VerificationRule] = {
    "global_surface_temperature": VerificationRule(5, 40, 20, 20_000, 300),
    "global_sea_surface_temperature": VerificationRule(10, 40, 45, 8_000, 250),
    "global_surface_temperature_anomaly": VerificationRule(-10, 10, 20, 20_000, 300),
    "global_sea_surface_temperature_anomaly": VerificationRule(-10, 10, 45, 8_000, 250),
    "global_sea_ice_extent": VerificationRule(0, 60, 20, 8_000, 300),
    "arctic_sea_ice_extent": VerificationRule(0, 30, 20, 8_000, 300),
    "antarctic_sea_ice_extent": VerificationRule(0, 35, 20, 8_000, 300),
    "atmospheric_co2": VerificationRule(200, 700, 120, 8_000, 120),
}

ANOMALY_PAIRS: tuple[tuple[str, str], ...] = (
    ("global_surface_temperature", "global_surface_temperature_anomaly"),
    ("global_sea_surface_temperature", "global_sea_surface_temperature_anomaly"),
)

SEA_ICE_IDENTITY: tuple[str, str, str] = (
    "global_sea_ice_extent",
    "arctic_sea_ice_extent",
    "antarctic_sea_ice_extent",
)


def metric_table() -> dict[str, MetricSpec]:
    return {spec.key: spec for spec in METRICS}
