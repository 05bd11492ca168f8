"""Selection orchestrator: load config and records, then run the engine.

Record loading is the only asynchronous step; both files are read
concurrently and awaited once before selection starts.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import yaml

from charity_selector.selection.engine import SelectionEngine
from charity_selector.selection.errors import ConfigError
from charity_selector.selection.models import CandidateItem, SelectionResult, UserProfile
from charity_selector.selection.partition import EligiblePools
from charity_selector.selection.randomness import RandomSource
from charity_selector.sources.base import BaseRecordSource
from charity_selector.sources.factory import build_source

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"


class SelectionOrchestrator:
    """Wire config, record source and selection engine together.

    Usage:
        orchestrator = SelectionOrchestrator()
        result = await orchestrator.run("charities.csv", "profile.csv")
    """

    def __init__(
        self,
        config_path: str = DEFAULT_CONFIG_PATH,
        source_factory: Callable[[Dict[str, Any]], BaseRecordSource] = build_source,
        random_source: Optional[RandomSource] = None,
    ):
        self.config_path = config_path
        self.source_factory = source_factory
        self.random_source = random_source
        self._config: Optional[Dict[str, Any]] = None

    @property
    def config(self) -> Dict[str, Any]:
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> Dict[str, Any]:
        """Load the YAML configuration; a missing file means all defaults."""
        path = Path(self.config_path)
        if not path.exists():
            logger.debug("Config %s not found; using defaults", self.config_path)
            return {}
        with open(path, "r", encoding="utf-8") as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid config file {self.config_path}: {e}") from e
        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigError(f"Config file {self.config_path} must contain a mapping")
        return config

    def build_engine(self) -> SelectionEngine:
        return SelectionEngine(self.config, random_source=self.random_source)

    async def load_records(
        self, candidates_path: str, profile_path: str
    ) -> Tuple[List[CandidateItem], UserProfile]:
        """Load candidates and the profile concurrently."""
        source = self.source_factory(self.config.get("source") or {})
        candidates, profile = await asyncio.gather(
            source.load_candidates(candidates_path),
            source.load_profile(profile_path),
        )
        return candidates, profile

    async def run(self, candidates_path: str, profile_path: str) -> SelectionResult:
        """Load records and run one selection."""
        engine = self.build_engine()
        candidates, profile = await self.load_records(candidates_path, profile_path)
        return engine.select(candidates, profile)

    async def inspect_pools(self, candidates_path: str, profile_path: str) -> EligiblePools:
        """Load records and return the eligible pools without selecting."""
        engine = self.build_engine()
        candidates, profile = await self.load_records(candidates_path, profile_path)
        return engine.partitioner.partition(candidates, profile)
