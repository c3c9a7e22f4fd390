"""Service status and introspection endpoints."""

from typing import Dict, List

from fastapi import APIRouter, Depends

from ... import __version__
from ...common import get_logger
from ...extraction.config import MirrorMeConfig
from ...extraction.providers import Provider, get_rule_set
from ..dependencies import get_app_config

router = APIRouter()
logger = get_logger(__name__)

PARSER_NAMES = {True: "json", False: "csv", None: "by extension"}


def provider_names() -> List[str]:
    return [p.value for p in Provider]


@router.get("/health")
async def health_check():
    """Liveness probe with version and supported providers."""
    return {
        "status": "healthy",
        "version": __version__,
        "providers": provider_names(),
    }


@router.get("/config")
async def get_configuration(config: MirrorMeConfig = Depends(get_app_config)):
    """Active configuration."""
    return config.model_dump()


@router.get("/providers")
async def list_providers(config: MirrorMeConfig = Depends(get_app_config)) -> Dict[str, Dict]:
    """Archive filenames each provider extracts, with the parser it uses."""
    listing = {}
    for provider in Provider:
        rule_set = get_rule_set(provider, config.providers)
        listing[provider.value] = {
            "format": PARSER_NAMES[rule_set.hierarchical],
            "files": sorted(rule_set.rules),
        }
    logger.debug(f"Listed {len(listing)} providers")
    return listing
