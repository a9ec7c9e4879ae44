import logging
from pathlib import Path
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple, Union

from services.pillar_engine.loader import DEFAULT_SPEC_PATH, load_pillar_spec_from_file
from services.pillar_engine.models import PillarDefinition, PillarSpec, UnknownPillarKey

logger = logging.getLogger(__name__)


class PillarRegistry:
    """
    Read-only lookup of pillar definitions.

    Built once from a validated PillarSpec and never mutated afterwards, so a
    single instance can be shared by any number of callers.
    """

    def __init__(self, spec: PillarSpec):
        self._version = spec.version
        self._definitions: Mapping[str, PillarDefinition] = MappingProxyType(
            {pillar.key: pillar for pillar in spec.pillars}
        )
        self._priority_order: Tuple[str, ...] = tuple(spec.priority_order)

    @classmethod
    def from_file(cls, path: Union[str, Path, None] = None) -> 'PillarRegistry':
        spec = load_pillar_spec_from_file(path or DEFAULT_SPEC_PATH)
        logger.info(f"Pillar registry loaded: version {spec.version}, pillars {list(spec.priority_order)}")
        return cls(spec)

    @property
    def version(self) -> str:
        return self._version

    def get_definition(self, key: str) -> PillarDefinition:
        try:
            return self._definitions[key]
        except (KeyError, TypeError):
            raise UnknownPillarKey(key) from None

    def priority_order(self) -> List[str]:
        return list(self._priority_order)

    def definitions(self) -> List[PillarDefinition]:
        """All definitions in priority order."""
        return [self._definitions[key] for key in self._priority_order]

    def __contains__(self, key: object) -> bool:
        try:
            return key in self._definitions
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._definitions)


_default_registry: Optional[PillarRegistry] = None


def get_default_registry() -> PillarRegistry:
    """Returns the registry built from the bundled definitions, loading it on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = PillarRegistry.from_file()
    return _default_registry
