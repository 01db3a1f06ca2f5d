# src/sanity/core/shipped_notifier.py
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sanity.core.event_bus import EventBus
from sanity.core.schemas import Record

CONFETTI_PALETTE: Tuple[str, ...] = (
    "#ffa500",  # orange
    "#3fb950",  # green
    "#58a6ff",  # blue
    "#f85149",  # red
    "#8957e5",  # purple
    "#f0e14a",  # yellow
)
BURST_DURATION = 2.0
PARTICLE_COUNT = 50


@dataclass(frozen=True)
class ConfettiParticle:
    """
    One piece of confetti. Positions are fractions of the overlay size so the
    same burst renders on any window; times are seconds from the burst start.
    """
    x: float
    y: float
    color: str
    rotation: float
    spin: float
    drift: float
    fall: float
    size: float
    delay: float
    lifetime: float

    @property
    def ends_at(self) -> float:
        return self.delay + self.lifetime

    def is_alive(self, t: float) -> bool:
        return self.delay <= t < self.ends_at

    def progress(self, t: float) -> float:
        return min(max((t - self.delay) / self.lifetime, 0.0), 1.0)

    def position_at(self, t: float) -> Tuple[float, float]:
        p = self.progress(t)
        # Eased fall: quick start, slowing towards the end.
        eased = 1.0 - (1.0 - p) ** 2
        return self.x + self.drift * p, self.y + self.fall * eased

    def rotation_at(self, t: float) -> float:
        return (self.rotation + self.spin * max(t - self.delay, 0.0)) % 360

    def opacity_at(self, t: float) -> float:
        if not self.is_alive(t):
            return 0.0
        p = self.progress(t)
        # Fully opaque for the first half, then fade out.
        return 1.0 if p < 0.5 else max(0.0, 1.0 - (p - 0.5) * 2)


@dataclass(frozen=True)
class ConfettiBurst:
    particles: Tuple[ConfettiParticle, ...]
    duration: float
    record_id: str = ""

    def alive_at(self, t: float) -> List[ConfettiParticle]:
        return [p for p in self.particles if p.is_alive(t)]

    def is_finished(self, t: float) -> bool:
        return all(t >= p.ends_at for p in self.particles)


class ShippedNotifier:
    """
    Turns 'promise_shipped' events into a confetti burst for the overlay.
    Holds no state between bursts; the overlay owns the burst once it is emitted.
    """

    def __init__(self, event_bus: EventBus, rng: Optional[random.Random] = None,
                 particle_count: int = PARTICLE_COUNT, duration: float = BURST_DURATION):
        self.event_bus = event_bus
        self.rng = rng or random.Random()
        self.particle_count = particle_count
        self.duration = duration

    def handle_promise_shipped(self, record: Record):
        burst = self.build_burst(record.id)
        self.log("success", f"Promise '{record.get('title', '')}' shipped!")
        self.event_bus.emit("confetti_burst_requested", burst)

    def build_burst(self, record_id: str = "") -> ConfettiBurst:
        particles = tuple(self._make_particle() for _ in range(self.particle_count))
        return ConfettiBurst(particles=particles, duration=self.duration, record_id=record_id)

    def _make_particle(self) -> ConfettiParticle:
        rng = self.rng
        delay = rng.uniform(0.0, self.duration * 0.3)
        return ConfettiParticle(
            x=rng.uniform(0.05, 0.95),
            y=rng.uniform(-0.1, 0.1),
            color=rng.choice(CONFETTI_PALETTE),
            rotation=rng.uniform(0.0, 360.0),
            spin=rng.uniform(-540.0, 540.0),
            drift=rng.uniform(-0.15, 0.15),
            fall=rng.uniform(0.5, 1.0),
            size=rng.uniform(6.0, 12.0),
            delay=delay,
            lifetime=rng.uniform(self.duration * 0.6, self.duration - delay),
        )

    def log(self, level: str, message: str):
        self.event_bus.emit("log_message_received", "ShippedNotifier", level, message)
