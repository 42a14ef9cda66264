"""Provisioning progress for the approval step.

Progress advances only on real milestones: stage ids pushed by the backend
while the build runs, or listed in the build response. Until the first
milestone arrives the progress is indeterminate (``percent is None``). The
nominal stage durations feed the ETA estimate only.
"""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    id: int
    title: str
    duration_ms: int


STAGES = (
    Stage(1, "Agent kaydı kesinleştiriliyor", 2000),
    Stage(2, "Dosyalar indeksleniyor", 3000),
    Stage(3, "Sosyal medya içerikleri toplanıyor", 2500),
    Stage(4, "Prompt derleniyor", 2000),
    Stage(5, "OpenAI'de agent konfigüre ediliyor", 4000),
    Stage(6, "Araç yetkileri test ediliyor", 3000),
    Stage(7, "Sağlık kontrolü ve test mesajı", 2000),
    Stage(8, "Yayınlandı!", 1000),
)

STAGE_IDS = {stage.id for stage in STAGES}
TOTAL_DURATION_MS = sum(stage.duration_ms for stage in STAGES)


class ProvisioningProgress:
    def __init__(self, stages: tuple[Stage, ...] = STAGES):
        self.stages = stages
        self.running = False
        self.completed: set[int] = set()

    def start(self) -> None:
        self.running = True
        self.completed = set()

    def mark_milestone(self, stage_id: int) -> None:
        """Record a finished stage. Earlier stages are implied complete."""
        if stage_id not in {s.id for s in self.stages}:
            logger.warning(f"Ignoring unknown provisioning milestone {stage_id}")
            return
        self.completed.update(s.id for s in self.stages if s.id <= stage_id)

    def complete(self) -> None:
        self.completed = {s.id for s in self.stages}
        self.running = False

    def reset(self) -> None:
        self.running = False
        self.completed = set()

    @property
    def is_complete(self) -> bool:
        return len(self.completed) == len(self.stages)

    @property
    def percent(self) -> Optional[float]:
        """Completed share in 0..100, or None while no milestone is known."""
        if not self.completed:
            return None
        return len(self.completed) / len(self.stages) * 100

    @property
    def current_stage(self) -> Optional[Stage]:
        """The first stage not yet completed, while running."""
        if not self.running:
            return None
        for stage in self.stages:
            if stage.id not in self.completed:
                return stage
        return None

    def eta_ms(self) -> Optional[int]:
        """Nominal time left, from the remaining stages' durations."""
        if not self.running:
            return None
        return sum(s.duration_ms for s in self.stages if s.id not in self.completed)
