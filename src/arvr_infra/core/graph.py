"""
Dependency graph of pipeline steps.

Each step declares the keys of the steps whose results it needs. The graph
validates the declarations and groups steps into execution waves: every
step in a wave depends only on steps of earlier waves, so a wave's members
may run concurrently.

Example:
    resource_group → network → {cluster, database} → storage → cdn

    waves(): [[resource_group], [network], [cluster, database], [storage], [cdn]]
"""

from typing import Dict, Generic, Iterable, List, Protocol, Sequence, TypeVar


class Node(Protocol):
    key: str
    depends_on: Sequence[str]


N = TypeVar("N", bound=Node)


class DependencyGraph(Generic[N]):
    def __init__(self, nodes: Iterable[N]):
        self._nodes: List[N] = list(nodes)
        self._by_key: Dict[str, N] = {}

        for node in self._nodes:
            if node.key in self._by_key:
                raise ValueError(f"Duplicate step key '{node.key}'")
            self._by_key[node.key] = node

        for node in self._nodes:
            for dependency in node.depends_on:
                if dependency not in self._by_key:
                    raise ValueError(
                        f"Step '{node.key}' depends on unknown step '{dependency}'. "
                        f"Available: {list(self._by_key)}"
                    )

        self._waves = self._compute_waves()

    def __len__(self) -> int:
        return len(self._nodes)

    def __getitem__(self, key: str) -> N:
        return self._by_key[key]

    @property
    def nodes(self) -> List[N]:
        return list(self._nodes)

    def _compute_waves(self) -> List[List[N]]:
        # Kahn's algorithm, keeping declaration order inside each wave.
        remaining = {node.key: set(node.depends_on) for node in self._nodes}
        waves: List[List[N]] = []

        while remaining:
            ready = [node for node in self._nodes if node.key in remaining and not remaining[node.key]]
            if not ready:
                raise ValueError(f"Dependency cycle between steps: {sorted(remaining)}")
            waves.append(ready)
            for node in ready:
                del remaining[node.key]
            for pending in remaining.values():
                pending.difference_update(n.key for n in ready)

        return waves

    def waves(self) -> List[List[N]]:
        """Steps grouped by dependency depth."""
        return [list(wave) for wave in self._waves]

    def ordered(self) -> List[N]:
        """
        Sequential execution order.

        This is the declaration order, which must already respect the
        dependencies; a step declared before one of its dependencies is
        rejected.
        """
        seen = set()
        for node in self._nodes:
            for dependency in node.depends_on:
                if dependency not in seen:
                    raise ValueError(
                        f"Step '{node.key}' is declared before its dependency '{dependency}'"
                    )
            seen.add(node.key)
        return list(self._nodes)

