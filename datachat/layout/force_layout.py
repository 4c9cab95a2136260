"""
Force-directed layout for the lineage graph.

The simulation follows d3-force: a cooling ``alpha`` scales four forces
applied every tick (link springs, many-body repulsion, centering and
rectangle-aware collision), velocities are damped and integrated, and the
run stops once alpha falls below ``alpha_min``.

Layout is pure computation. ``LayoutHandle`` is a lazy iterator of
``LayoutSnapshot``s; the caller renders each snapshot however it likes.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from ..config import LayoutConfig
from ..log import TRACE_LEVEL
from ..models.dataclasses import GraphLink, GraphNode, LayoutSnapshot, NodePosition
from .text_metrics import TextMeasurer, measure_text, rect_width


logger = logging.getLogger(__name__)

INITIAL_RADIUS = 10
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


@dataclass
class LayoutNode:
    """Mutable simulation state for one node."""
    id: Any
    index: int
    width: float
    height: float
    radius: float
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None
    fy: Optional[float] = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None


@dataclass
class LayoutLink:
    source: LayoutNode
    target: LayoutNode
    strength: float = 1.0
    bias: float = 0.5
    distance: float = 150


class LayoutHandle:
    """
    A running simulation.

    Iterate it to advance tick by tick; ``pin``/``unpin`` mirror a drag
    gesture (start/move, end). Once disposed the handle yields nothing and
    ignores further pins.
    """

    def __init__(self, nodes: List[LayoutNode], links: List[LayoutLink],
                 center: Tuple[float, float], config: LayoutConfig):
        self.nodes = nodes
        self.links = links
        self.center = center
        self.config = config

        self.alpha = 1.0
        self.alpha_target = 0.0
        self.tick = 0

        self._by_id = {n.id: n for n in nodes}
        self._random = random.Random(config.seed)
        self._ticks_since_restart = 0
        self._stopped = False
        self._disposed = False

    @property
    def running(self) -> bool:
        return not (self._stopped or self._disposed)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def __iter__(self) -> Iterator[LayoutSnapshot]:
        while True:
            snapshot = self.step()
            if snapshot is None:
                return
            yield snapshot

    def step(self) -> Optional[LayoutSnapshot]:
        """Advance one tick; None once stopped or disposed."""
        if not self.running:
            return None

        self._tick()
        self.tick += 1
        self._ticks_since_restart += 1
        logger.log(TRACE_LEVEL, f"Tick {self.tick}: alpha={self.alpha:.5f}")

        if self.alpha < self.config.alpha_min or self._ticks_since_restart >= self.config.max_iterations:
            self._stopped = True
            logger.debug(f"Layout stopped at tick {self.tick} (alpha={self.alpha:.5f})")

        return self.snapshot()

    def run(self) -> LayoutSnapshot:
        """Run until the simulation stops; returns the final state."""
        for _ in self:
            pass
        return self.snapshot()

    def snapshot(self) -> LayoutSnapshot:
        return LayoutSnapshot(tick=self.tick, alpha=self.alpha, positions=self.positions())

    def positions(self) -> Dict[Any, NodePosition]:
        return {
            n.id: NodePosition(x=n.x, y=n.y, width=n.width, height=n.height, pinned=n.pinned)
            for n in self.nodes
        }

    def pin(self, node_id: Any, x: float, y: float):
        """Fix a node at (x, y); the first active pin reheats the simulation."""
        if self._disposed:
            return
        node = self._node(node_id)

        if not any(n.pinned for n in self.nodes):
            self.alpha_target = self.config.drag_alpha_target
            self.restart()
        elif self._stopped:
            # Held past max_iterations; keep following the drag
            self.restart()

        node.fx = x
        node.fy = y

    def unpin(self, node_id: Any):
        """Release a node; the last release lets the simulation cool down."""
        if self._disposed:
            return
        node = self._node(node_id)
        node.fx = None
        node.fy = None

        if not any(n.pinned for n in self.nodes):
            self.alpha_target = 0.0

    def restart(self):
        if self._disposed:
            return
        self._stopped = False
        self._ticks_since_restart = 0

    def dispose(self):
        self._disposed = True

    def _node(self, node_id: Any) -> LayoutNode:
        try:
            return self._by_id[node_id]
        except KeyError:
            raise ValueError(f"Unknown node: {node_id}")

    def _jiggle(self) -> float:
        return (self._random.random() - 0.5) * 1e-6

    def _tick(self):
        cfg = self.config
        self.alpha += (self.alpha_target - self.alpha) * cfg.alpha_decay

        self._apply_links(self.alpha)
        self._apply_charge(self.alpha)
        self._apply_center()
        self._apply_collision()

        keep = 1 - cfg.velocity_decay
        for n in self.nodes:
            if n.fx is None:
                n.vx *= keep
                n.x += n.vx
            else:
                n.x = n.fx
                n.vx = 0.0
            if n.fy is None:
                n.vy *= keep
                n.y += n.vy
            else:
                n.y = n.fy
                n.vy = 0.0

    def _apply_links(self, alpha: float):
        for link in self.links:
            s, t = link.source, link.target
            x = t.x + t.vx - s.x - s.vx or self._jiggle()
            y = t.y + t.vy - s.y - s.vy or self._jiggle()
            l = math.sqrt(x * x + y * y)
            l = (l - link.distance) / l * alpha * link.strength
            x *= l
            y *= l
            b = link.bias
            t.vx -= x * b
            t.vy -= y * b
            s.vx += x * (1 - b)
            s.vy += y * (1 - b)

    def _apply_charge(self, alpha: float):
        strength = self.config.charge_strength
        distance_min2 = self.config.charge_distance_min ** 2

        for node in self.nodes:
            for other in self.nodes:
                if other is node:
                    continue
                x = other.x - node.x
                y = other.y - node.y
                l = x * x + y * y
                if x == 0:
                    x = self._jiggle()
                    l += x * x
                if y == 0:
                    y = self._jiggle()
                    l += y * y
                if l < distance_min2:
                    l = math.sqrt(distance_min2 * l)
                node.vx += x * strength * alpha / l
                node.vy += y * strength * alpha / l

    def _apply_center(self):
        if not self.nodes:
            return
        cx, cy = self.center
        sx = sum(n.x for n in self.nodes) / len(self.nodes) - cx
        sy = sum(n.y for n in self.nodes) / len(self.nodes) - cy
        for n in self.nodes:
            n.x -= sx
            n.y -= sy

    def _apply_collision(self):
        # Circle radius covers the rectangle's half-diagonal, so circles
        # apart means rectangles apart
        for i, node in enumerate(self.nodes):
            ri = node.radius
            ri2 = ri * ri
            xi = node.x + node.vx
            yi = node.y + node.vy
            for other in self.nodes[i + 1:]:
                rj = other.radius
                r = ri + rj
                x = xi - other.x - other.vx
                y = yi - other.y - other.vy
                l = x * x + y * y
                if l >= r * r:
                    continue
                if x == 0:
                    x = self._jiggle()
                    l += x * x
                if y == 0:
                    y = self._jiggle()
                    l += y * y
                l = math.sqrt(l)
                l = (r - l) / l
                x *= l
                y *= l
                w = rj * rj / (ri2 + rj * rj)
                node.vx += x * w
                node.vy += y * w
                other.vx -= x * (1 - w)
                other.vy -= y * (1 - w)


class ForceLayoutEngine:
    """Starts layouts; only the most recent one stays live."""

    def __init__(self, config: Optional[LayoutConfig] = None,
                 measurer: TextMeasurer = measure_text):
        self.config = config or LayoutConfig()
        self.measurer = measurer
        self.current: Optional[LayoutHandle] = None

    def start_layout(self, nodes: Sequence[GraphNode], links: Sequence[GraphLink],
                     canvas_size: Optional[Tuple[float, float]] = None) -> LayoutHandle:
        """
        Start a simulation for a graph, disposing any running one.

        Args:
            nodes: Graph nodes (labels size the rectangles)
            links: Graph links; both endpoints must be in nodes
            canvas_size: (width, height); defaults to the configured canvas

        Raises:
            ValueError: If a link references an unknown node id
        """
        cfg = self.config
        width, height = canvas_size or cfg.canvas_size

        layout_nodes = []
        for i, node in enumerate(nodes):
            w = rect_width(node.name, cfg, self.measurer)
            radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
            angle = i * INITIAL_ANGLE
            layout_nodes.append(LayoutNode(
                id=node.id,
                index=i,
                width=w,
                height=cfg.node_height,
                radius=w / 2 + cfg.collision_padding,
                x=radius * math.cos(angle),
                y=radius * math.sin(angle),
            ))

        by_id = {n.id: n for n in layout_nodes}
        layout_links = []
        for link in links:
            if link.source not in by_id or link.target not in by_id:
                raise ValueError(f"Link {link.source} -> {link.target} references an unknown node")
            layout_links.append(LayoutLink(
                source=by_id[link.source],
                target=by_id[link.target],
                distance=cfg.link_distance,
            ))
        _init_link_weights(layout_links)

        if self.current is not None:
            self.current.dispose()

        self.current = LayoutHandle(layout_nodes, layout_links, (width / 2, height / 2), cfg)
        logger.debug(f"Started layout: {len(layout_nodes)} nodes, {len(layout_links)} links")
        return self.current

    def pin(self, node_id: Any, x: float, y: float):
        if self.current is not None:
            self.current.pin(node_id, x, y)

    def unpin(self, node_id: Any):
        if self.current is not None:
            self.current.unpin(node_id)


def _init_link_weights(links: List[LayoutLink]):
    """Links of busy nodes pull weaker and move the busier end less."""
    count: Dict[int, int] = {}
    for link in links:
        count[link.source.index] = count.get(link.source.index, 0) + 1
        count[link.target.index] = count.get(link.target.index, 0) + 1

    for link in links:
        cs = count[link.source.index]
        ct = count[link.target.index]
        link.strength = 1 / min(cs, ct)
        link.bias = cs / (cs + ct)
