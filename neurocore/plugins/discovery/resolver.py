"""
Priority Resolver - Selects the single winning plugin for an intent

Resolution is an ordered pipeline of strategies. Each strategy is a pure
function over one immutable ``ResolutionIndex`` that either returns a
``Resolution`` or None to let the next strategy try. The discovery
facade picks the pipeline:

- priority mode: override -> sole candidate -> priority table
- simple mode:   linear scan (first structural match in load order)
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Union

from ...config.models import TieBreak
from ...core.interfaces.plugin import IntentPlugin
from ...intents.models import Intent
from .loader import PluginLoadResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Outcome of a successful resolution"""
    plugin_id: str
    strategy: str
    priority: Optional[Union[int, float]] = None


@dataclass(frozen=True)
class ResolutionIndex:
    """Immutable view of the loaded plugin set, built once after discovery"""
    order: Tuple[str, ...] = ()
    plugins: Mapping[str, PluginLoadResult] = field(default_factory=dict)
    candidates: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    overrides: Mapping[str, str] = field(default_factory=dict)
    substituted: FrozenSet[str] = frozenset()
    tie_break: TieBreak = TieBreak.PLUGIN_ID
    substitution_affects_resolution: bool = False

    def candidates_for(self, action: str) -> Tuple[str, ...]:
        """Candidate ids for an action in load order, honoring substitution mode"""
        ids = self.candidates.get(action, ())
        if self.substitution_affects_resolution:
            ids = tuple(pid for pid in ids if pid not in self.substituted)
        return ids


Strategy = Callable[[ResolutionIndex, str], Optional[Resolution]]


def build_index(
    results: Sequence[PluginLoadResult],
    overrides: Optional[Mapping[str, str]] = None,
    tie_break: TieBreak = TieBreak.PLUGIN_ID,
    substitution_affects_resolution: bool = False,
) -> ResolutionIndex:
    """
    Build the action -> candidate index from load results.

    Results with an id already seen are ignored; the first one wins.
    """
    plugins: Dict[str, PluginLoadResult] = {}
    candidates: Dict[str, List[str]] = {}

    for result in results:
        if result.id in plugins:
            logger.warning(f"Ignoring duplicate plugin id in resolver: {result.id}")
            continue
        plugins[result.id] = result

        try:
            intents = result.plugin.supported_intents()
        except Exception as e:
            logger.error(f"Plugin {result.id} failed to report supported intents: {e}")
            continue

        for action in intents:
            action_candidates = candidates.setdefault(action, [])
            if result.id not in action_candidates:
                action_candidates.append(result.id)

    substituted = frozenset(
        target
        for result in plugins.values()
        for target in result.manifest.substitutes
        if target != result.id
    )

    return ResolutionIndex(
        order=tuple(plugins),
        plugins=dict(plugins),
        candidates={action: tuple(ids) for action, ids in candidates.items()},
        overrides=dict(overrides or {}),
        substituted=substituted,
        tie_break=tie_break,
        substitution_affects_resolution=substitution_affects_resolution,
    )


def override_strategy(index: ResolutionIndex, action: str) -> Optional[Resolution]:
    """Operator override wins whenever it names a loaded plugin"""
    plugin_id = index.overrides.get(action)
    if plugin_id is None:
        return None
    if plugin_id not in index.plugins:
        logger.warning(f"Override handler {plugin_id} for {action} not found")
        return None
    return Resolution(plugin_id=plugin_id, strategy="override")


def sole_candidate_strategy(index: ResolutionIndex, action: str) -> Optional[Resolution]:
    """A sole candidate wins without consulting its intent mapping"""
    ids = index.candidates_for(action)
    if len(ids) != 1:
        return None
    return Resolution(plugin_id=ids[0], strategy="sole_candidate")


def priority_strategy(index: ResolutionIndex, action: str) -> Optional[Resolution]:
    """
    Highest enabled priority among several candidates.

    Candidates without an enabled mapping for the action are excluded. If
    none remain, resolution fails even though the action is indexed.
    """
    ranked: List[Tuple[str, Union[int, float]]] = []
    for plugin_id in index.candidates_for(action):
        entry = index.plugins[plugin_id].manifest.intent_config(action)
        if entry is not None and entry.enabled:
            ranked.append((plugin_id, entry.priority))

    if not ranked:
        return None

    highest = max(priority for _, priority in ranked)
    tied = [plugin_id for plugin_id, priority in ranked if priority == highest]

    # ranked keeps load order, so the first tied id is the earliest loaded
    winner = min(tied) if index.tie_break == TieBreak.PLUGIN_ID else tied[0]
    if len(tied) > 1:
        logger.debug(f"Priority tie for {action} between {tied}, broken by {index.tie_break.value}: {winner}")
    return Resolution(plugin_id=winner, strategy="priority", priority=highest)


def linear_scan_strategy(index: ResolutionIndex, action: str) -> Optional[Resolution]:
    """First plugin in load order that structurally supports the action"""
    for plugin_id in index.order:
        plugin = index.plugins[plugin_id].plugin
        try:
            if action in plugin.supported_intents():
                return Resolution(plugin_id=plugin_id, strategy="linear_scan")
        except Exception as e:
            logger.error(f"Plugin {plugin_id} failed to report supported intents: {e}")
    return None


PRIORITY_PIPELINE: Tuple[Strategy, ...] = (override_strategy, sole_candidate_strategy, priority_strategy)
SIMPLE_PIPELINE: Tuple[Strategy, ...] = (linear_scan_strategy,)


def run_pipeline(strategies: Sequence[Strategy], index: ResolutionIndex, action: str) -> Optional[Resolution]:
    """Return the first resolution produced by the strategies, in order"""
    for strategy in strategies:
        resolution = strategy(index, action)
        if resolution is not None:
            return resolution
        # Once candidates exist, the priority table is the final word
        if strategy is priority_strategy and len(index.candidates_for(action)) > 1:
            return None
    return None


class PriorityResolver:
    """
    Priority-based intent resolver.

    Holds the immutable index for the loaded plugin set and answers
    resolution and substitution queries. Reads are side-effect free, so
    concurrent lookups need no locking once plugins are registered.
    """

    def __init__(
        self,
        intent_handlers: Optional[Mapping[str, str]] = None,
        tie_break: TieBreak = TieBreak.PLUGIN_ID,
        substitution_affects_resolution: bool = False,
        strategies: Sequence[Strategy] = PRIORITY_PIPELINE,
    ):
        self._overrides = dict(intent_handlers or {})
        self._tie_break = tie_break
        self._substitution_affects_resolution = substitution_affects_resolution
        self._strategies = tuple(strategies)
        self._index = ResolutionIndex(
            overrides=self._overrides,
            tie_break=tie_break,
            substitution_affects_resolution=substitution_affects_resolution,
        )

    @property
    def index(self) -> ResolutionIndex:
        return self._index

    def register_plugins(self, results: Sequence[PluginLoadResult]) -> None:
        """Rebuild the index from the full set of load results"""
        self._index = build_index(
            results,
            overrides=self._overrides,
            tie_break=self._tie_break,
            substitution_affects_resolution=self._substitution_affects_resolution,
        )
        logger.info(f"Registered {len(self._index.plugins)} plugins with resolver")

        for action, ids in self._index.candidates.items():
            logger.debug(f"Intent {action} can be handled by: {', '.join(ids)}")

    def explain(self, action: str) -> Optional[Resolution]:
        """Resolution for an action, including the strategy that produced it"""
        return run_pipeline(self._strategies, self._index, action)

    def resolve_plugin_for_intent(self, intent: Intent) -> Optional[IntentPlugin]:
        """Find the plugin that should handle an intent, or None"""
        resolution = self.explain(intent.action)
        if resolution is None:
            logger.debug(f"No handler resolved for {intent.action}")
            return None

        logger.debug(f"Resolved handler for {intent.action}: {resolution.plugin_id} ({resolution.strategy})")
        return self._index.plugins[resolution.plugin_id].plugin

    def get_candidates(self, action: str) -> List[str]:
        """Indexed candidate ids for an action, in load order"""
        return list(self._index.candidates.get(action, ()))

    def is_plugin_substituted(self, plugin_id: str) -> bool:
        """True iff another loaded plugin lists this id in its substitutes"""
        return plugin_id in self._index.substituted

    def get_substituting_plugin(self, plugin_id: str) -> Optional[IntentPlugin]:
        """First plugin in load order that substitutes the given id"""
        for other_id in self._index.order:
            if other_id == plugin_id:
                continue
            result = self._index.plugins[other_id]
            if plugin_id in result.manifest.substitutes:
                return result.plugin
        return None
