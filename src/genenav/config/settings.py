"""Settings loader.

Loads defaults from the packaged YAML file and applies ``GENENAV_*``
environment overrides on top.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

ENV_PREFIX = "GENENAV_"


class GeneNavSettings(BaseModel):
    """Runtime configuration for API clients and the navigation controller."""

    ucsc_url: str = "https://api.genome.ucsc.edu"
    eutils_url: str = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
    clinical_tables_url: str = "https://clinicaltables.nlm.nih.gov/api/ncbi_genes/v3/search"
    evo2_url: str | None = None

    timeout: float = Field(30.0, gt=0)
    max_retries: int = Field(3, ge=1)

    default_assembly: str = "hg38"
    default_organism: str = "Human"
    max_view_range: int = Field(10_000, gt=0)
    initial_window: int = Field(10_000, gt=0)
    gene_search_limit: int = Field(10, gt=0)
    clinvar_retmax: int = Field(20, gt=0)

    max_sessions: int = Field(100, gt=0)
    session_idle_timeout: float = Field(3600.0, gt=0, description="Seconds before an idle backend session is dropped")

    log_level: str = "INFO"


def _env_overrides(environ: dict[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in GeneNavSettings.model_fields:
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None and value != "":
            overrides[name] = value
    return overrides


def build_settings(
    config: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> GeneNavSettings:
    """Merge a config mapping with environment overrides into settings."""
    merged = dict(config or {})
    merged.update(_env_overrides(dict(os.environ) if environ is None else environ))
    return GeneNavSettings(**merged)


@lru_cache(maxsize=1)
def load_settings() -> GeneNavSettings:
    """Load settings from defaults.yaml plus environment overrides.

    Returns:
        GeneNavSettings instance with loaded configuration.
    """
    config_path = Path(__file__).parent / "defaults.yaml"

    if not config_path.exists():
        return build_settings({})

    with open(config_path) as f:
        config = yaml.safe_load(f)

    return build_settings(config or {})
